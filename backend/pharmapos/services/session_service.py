# Overview: Service-layer operations for session; encapsulates business logic and database work.

"""
Access token issuance and verification.

Tokens are signed JWTs carrying {id, username, role}, valid for
JWT_ACCESS_TOKEN_EXPIRES (24h). Verification is stateless: no token table,
no refresh, no server-side revocation.
"""

from __future__ import annotations

from dataclasses import dataclass

from flask_jwt_extended import create_access_token, decode_token
from flask_jwt_extended.exceptions import JWTExtendedException
from jwt.exceptions import PyJWTError

from ..models import User


@dataclass(frozen=True)
class SessionContext:
    """Verified token claims for the current request."""
    user_id: int
    username: str
    role: str

    def to_dict(self) -> dict:
        return {"id": self.user_id, "username": self.username, "role": self.role}


def create_session(user: User) -> str:
    """Issue a signed access token for the user."""
    return create_access_token(
        identity=str(user.id),
        additional_claims={
            "id": user.id,
            "username": user.username,
            "role": user.role,
        },
    )


def validate_session(token: str) -> SessionContext | None:
    """
    Verify signature and expiry and return the session context.

    Returns None for a malformed, tampered or expired token.
    """
    if not token:
        return None

    try:
        claims = decode_token(token)
    except (PyJWTError, JWTExtendedException):
        return None

    if claims.get("type") != "access":
        return None

    user_id = claims.get("id")
    username = claims.get("username")
    role = claims.get("role")
    if not isinstance(user_id, int) or not username or not role:
        return None

    return SessionContext(user_id=user_id, username=username, role=role)
