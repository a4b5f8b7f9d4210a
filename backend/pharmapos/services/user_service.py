# Overview: Service-layer operations for users; encapsulates business logic and database work.

"""
Staff account management.

Self-protection rules:
- Only a superadmin may create, edit or delete a superadmin account
- Only a superadmin may give any account the superadmin role
- Nobody may delete their own account
"""

from __future__ import annotations

from flask import current_app
from sqlalchemy.exc import IntegrityError

from ..errors import Conflict, Forbidden, NotFound, ValidationError
from ..extensions import db
from ..models import Outlet, Role, User
from ..models.auth import USER_STATUSES
from ..permissions import SUPERADMIN_ROLE
from ..validation import parse_positive_int
from .auth_service import hash_password
from .pagination import paginate


USER_FIELDS = {"username", "password", "role", "outlet_id", "status"}


def _is_superadmin(role: str | None) -> bool:
    return role == SUPERADMIN_ROLE


def _clean_user_payload(payload: dict, *, partial: bool) -> dict:
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")

    for key in payload:
        if key not in USER_FIELDS:
            raise ValidationError(f"Field not allowed: {key}")

    if not partial:
        missing = sorted(f for f in ("username", "password", "role") if not payload.get(f))
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")

    patch: dict = {}

    if "username" in payload:
        username = payload["username"]
        if not isinstance(username, str) or not username.strip():
            raise ValidationError("username cannot be blank")
        username = username.strip()
        if len(username) > 64:
            raise ValidationError("username exceeds max length 64")
        patch["username"] = username

    # Blank password on edit means "keep the current one"
    if payload.get("password"):
        patch["password_hash"] = hash_password(payload["password"])

    if "role" in payload:
        role = payload["role"]
        if not isinstance(role, str) or not role.strip():
            raise ValidationError("role cannot be blank")
        role = role.strip()
        if not _is_superadmin(role) and not db.session.query(Role).filter_by(name=role).first():
            raise ValidationError(f"Unknown role: {role}")
        patch["role"] = role

    if "outlet_id" in payload:
        outlet_id = payload["outlet_id"]
        if outlet_id in (None, ""):
            patch["outlet_id"] = None
        else:
            outlet_id = parse_positive_int(outlet_id, "outlet_id")
            if not db.session.query(Outlet).filter_by(id=outlet_id).first():
                raise NotFound("Outlet not found")
            patch["outlet_id"] = outlet_id

    if "status" in payload:
        if payload["status"] not in USER_STATUSES:
            raise ValidationError(f"status must be one of: {', '.join(USER_STATUSES)}")
        patch["status"] = payload["status"]

    return patch


def list_users(*, page=None, limit=None, search: str | None = None) -> dict:
    query = db.session.query(User)
    if search:
        pattern = f"%{search.strip()}%"
        query = query.filter(db.or_(User.username.ilike(pattern), User.role.ilike(pattern)))
    query = query.order_by(User.username.asc(), User.id.asc())
    return paginate(query, page=page, limit=limit, serialize=lambda u: u.to_dict())


def get_user(user_id: int) -> User:
    user = db.session.query(User).filter_by(id=user_id).first()
    if not user:
        raise NotFound("User not found")
    return user


def _commit_user(user: User) -> None:
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise Conflict(f"Username {user.username!r} is already taken")


def create_user(actor, payload: dict) -> User:
    """actor is the SessionContext of the caller."""
    patch = _clean_user_payload(payload, partial=False)

    if _is_superadmin(patch["role"]) and not _is_superadmin(actor.role):
        raise Forbidden("Only a superadmin can create superadmin accounts")

    if db.session.query(User).filter_by(username=patch["username"]).first():
        raise Conflict(f"Username {patch['username']!r} is already taken")

    user = User(status="active", **patch)
    db.session.add(user)
    _commit_user(user)
    current_app.logger.info("User %s created by %s", user.username, actor.username)
    return user


def update_user(actor, user_id: int, payload: dict) -> User:
    user = get_user(user_id)

    if _is_superadmin(user.role) and not _is_superadmin(actor.role):
        raise Forbidden("Only a superadmin can edit superadmin accounts")

    patch = _clean_user_payload(payload, partial=True)

    if _is_superadmin(patch.get("role")) and not _is_superadmin(actor.role):
        raise Forbidden("Only a superadmin can grant the superadmin role")

    if "username" in patch and patch["username"] != user.username:
        taken = db.session.query(User).filter(User.username == patch["username"], User.id != user.id).first()
        if taken:
            raise Conflict(f"Username {patch['username']!r} is already taken")

    for key, value in patch.items():
        setattr(user, key, value)
    _commit_user(user)
    return user


def delete_user(actor, user_id: int) -> None:
    user = get_user(user_id)

    if user.id == actor.user_id:
        raise Forbidden("You cannot delete your own account")

    if _is_superadmin(user.role) and not _is_superadmin(actor.role):
        raise Forbidden("Only a superadmin can delete superadmin accounts")

    db.session.delete(user)
    db.session.commit()
    current_app.logger.info("User %s deleted by %s", user.username, actor.username)
