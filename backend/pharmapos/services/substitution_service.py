# Overview: Service-layer operations for substitutions; encapsulates business logic and database work.

"""
Product substitution lookup.

The recommendation engine runs elsewhere; this service forwards the
pharmacist's question to it and hands back its JSON answer.
"""

from __future__ import annotations

import httpx
from flask import current_app

from ..errors import ServerError, ValidationError


MAX_MESSAGE_LENGTH = 2000


def lookup_substitutes(message, *, client: httpx.Client | None = None) -> dict:
    """
    POST {"message": ...} to SUBSTITUTION_API_URL.

    Returns the upstream JSON, which carries a "recommendations" list.
    """
    if not isinstance(message, str) or not message.strip():
        raise ValidationError("message is required")
    message = message.strip()
    if len(message) > MAX_MESSAGE_LENGTH:
        raise ValidationError(f"message exceeds max length {MAX_MESSAGE_LENGTH}")

    url = current_app.config.get("SUBSTITUTION_API_URL")
    if not url:
        raise ServerError("Substitution service is not configured")

    headers = {"Content-Type": "application/json"}
    api_key = current_app.config.get("SUBSTITUTION_API_KEY")
    if api_key:
        headers["Authorization"] = f"Bearer {api_key}"

    owns_client = client is None
    if owns_client:
        client = httpx.Client(timeout=current_app.config.get("SUBSTITUTION_TIMEOUT", 30.0))

    try:
        response = client.post(url, json={"message": message}, headers=headers)
        response.raise_for_status()
        data = response.json()
    except httpx.HTTPError as exc:
        current_app.logger.exception("Substitution request failed: %s", exc)
        raise ServerError("Substitution service unavailable") from exc
    except ValueError as exc:
        current_app.logger.exception("Substitution service returned invalid JSON")
        raise ServerError("Substitution service returned an invalid response") from exc
    finally:
        if owns_client:
            client.close()

    if not isinstance(data, dict):
        raise ServerError("Substitution service returned an invalid response")

    data.setdefault("recommendations", [])
    return data
