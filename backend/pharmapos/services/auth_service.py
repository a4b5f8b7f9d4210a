# Overview: Service-layer operations for auth; encapsulates business logic and database work.

"""
Password hashing and credential checks.

SECURITY NOTES:
- Passwords hashed with bcrypt (cost from BCRYPT_ROUNDS, 12 by default)
- Minimum 8 characters with at least one letter and one digit
- Unknown user, wrong password and inactive account all fail the same way
- Access tokens are issued separately (see session_service.py)
"""

from __future__ import annotations

import re

import bcrypt
from flask import current_app

from ..errors import InvalidCredentials, ValidationError
from ..extensions import db
from ..models import User
from . import session_service


class PasswordValidationError(ValidationError):
    """Raised when password doesn't meet strength requirements."""
    pass


def validate_password_strength(password: str) -> None:
    """
    Validate password meets strength requirements.

    Requirements:
    - Minimum 8 characters
    - At least one letter
    - At least one digit

    Raises PasswordValidationError if requirements not met.
    """
    if not isinstance(password, str):
        raise PasswordValidationError("Password must be a string")

    if len(password) < 8:
        raise PasswordValidationError("Password must be at least 8 characters long")

    if not re.search(r'[A-Za-z]', password):
        raise PasswordValidationError("Password must contain at least one letter")

    if not re.search(r'\d', password):
        raise PasswordValidationError("Password must contain at least one digit")


def hash_password(password: str) -> str:
    """
    Hash password using bcrypt.

    Password is validated for strength before hashing.
    """
    validate_password_strength(password)
    rounds = current_app.config.get("BCRYPT_ROUNDS", 12)
    salt = bcrypt.gensalt(rounds=rounds)
    hashed = bcrypt.hashpw(password.encode('utf-8'), salt)
    return hashed.decode('utf-8')  # Store as string in database


def verify_password(password: str, password_hash: str) -> bool:
    """
    Verify password against bcrypt hash.

    Returns True if password matches hash, False otherwise.
    """
    try:
        return bcrypt.checkpw(password.encode('utf-8'), password_hash.encode('utf-8'))
    except ValueError:
        # Malformed hash in the database
        return False


def authenticate(username: str, password: str) -> User | None:
    """
    Check credentials. Username match is exact and case-sensitive.

    Returns the User on success, None otherwise.
    """
    if not isinstance(username, str) or not isinstance(password, str):
        return None

    user = db.session.query(User).filter(User.username == username).first()
    if not user:
        return None

    if not verify_password(password, user.password_hash):
        return None

    if not user.is_active:
        return None

    return user


def login(username: str, password: str) -> tuple[str, User]:
    """
    Authenticate and issue an access token.

    Raises InvalidCredentials with one message for every failure cause.
    """
    user = authenticate(username, password)
    if user is None:
        current_app.logger.warning("Failed login for username=%r", username)
        raise InvalidCredentials("Invalid credentials")

    token = session_service.create_session(user)
    current_app.logger.info("User %s logged in", user.username)
    return token, user
