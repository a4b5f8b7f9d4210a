# Overview: Typed API errors raised by services and rendered by the app error handler.

from __future__ import annotations


class APIError(Exception):
    """Base error carrying the HTTP status it is rendered with."""

    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {"message": self.message}


class ValidationError(APIError):
    status_code = 400
    default_message = "Invalid request"


class Unauthorized(APIError):
    status_code = 401
    default_message = "Unauthorized"


class InvalidCredentials(APIError):
    status_code = 401
    default_message = "Invalid credentials"


class Forbidden(APIError):
    status_code = 403
    default_message = "Forbidden"


class NotFound(APIError):
    status_code = 404
    default_message = "Not found"


class Conflict(APIError):
    status_code = 409
    default_message = "Conflict"


class InsufficientStock(APIError):
    status_code = 400
    default_message = "Insufficient stock"


class EmptyCart(APIError):
    status_code = 400
    default_message = "Cart is empty"


class ServerError(APIError):
    status_code = 500
    default_message = "Internal server error"
