# Overview: Service-layer operations for permission; encapsulates business logic and database work.

"""
Role-based access control over the role x module x action matrix.

DESIGN PRINCIPLES:
- The reserved "superadmin" role is allowed everything, with or without a row
- Fail closed: an unknown role name resolves to no permissions at all
- A permission is granted only by a row with allowed == True
- Log denials only: grants are not logged
"""

from __future__ import annotations

from flask import current_app
from sqlalchemy.exc import IntegrityError

from ..errors import Conflict, Forbidden, NotFound, ValidationError
from ..extensions import db
from ..models import Role, RolePermission, User
from ..permissions import (
    ACTIONS,
    MODULES,
    SUPERADMIN_ROLE,
    Action,
    empty_matrix_row,
    parse_action,
    validate_module,
)
from .concurrency import atomic


def is_superadmin(role_name: str | None) -> bool:
    return role_name == SUPERADMIN_ROLE


def resolve_role_id(role_name: str | None) -> int | None:
    """Role name -> id, or None when the role does not exist."""
    if not role_name:
        return None
    role = db.session.query(Role).filter_by(name=role_name).first()
    return role.id if role else None


def has_permission(role_name: str | None, module: str, action: str | Action) -> bool:
    """
    Check if a role may perform action on module.

    Fails closed when the role cannot be resolved.
    """
    if is_superadmin(role_name):
        return True

    role_id = resolve_role_id(role_name)
    if role_id is None:
        return False

    action_value = action.value if isinstance(action, Action) else action
    row = db.session.query(RolePermission).filter_by(
        role_id=role_id,
        module=module,
        action=action_value,
    ).first()
    return bool(row and row.allowed)


def require_permission(context, module: str, action: str | Action, resource: str | None = None) -> None:
    """
    Require permission or raise Forbidden.

    context is the SessionContext of the caller.
    """
    if has_permission(context.role, module, action):
        return

    action_value = action.value if isinstance(action, Action) else action
    current_app.logger.warning(
        "Permission denied: user=%s role=%s module=%s action=%s path=%s",
        context.username,
        context.role,
        module,
        action_value,
        resource,
    )
    raise Forbidden("Forbidden")


def require_superadmin(context, resource: str | None = None) -> None:
    if is_superadmin(context.role):
        return
    current_app.logger.warning(
        "Superadmin required: user=%s role=%s path=%s",
        context.username,
        context.role,
        resource,
    )
    raise Forbidden("Forbidden")


# =============================================================================
# Matrix reads
# =============================================================================

def get_role(role_id: int) -> Role:
    role = db.session.query(Role).filter_by(id=role_id).first()
    if not role:
        raise NotFound("Role not found")
    return role


def _matrix_from_rows(rows) -> list[dict]:
    matrix = {module: empty_matrix_row(module) for module in MODULES}
    for row in rows:
        # Rows for modules or actions that are no longer recognised are ignored
        if row.module in matrix and row.action in ACTIONS:
            matrix[row.module][row.action] = bool(row.allowed)
    return [matrix[module] for module in MODULES]


def get_role_permissions(role_id: int) -> list[dict]:
    """Full matrix for a role: one {module, create, edit, delete, show} per module."""
    get_role(role_id)
    rows = db.session.query(RolePermission).filter_by(role_id=role_id).all()
    return _matrix_from_rows(rows)


def get_permissions_for_role_name(role_name: str | None) -> list[dict]:
    """
    Matrix by role name.

    superadmin gets everything; an unknown role gets nothing.
    """
    if is_superadmin(role_name):
        return [empty_matrix_row(module, allowed=True) for module in MODULES]

    role_id = resolve_role_id(role_name)
    if role_id is None:
        return _matrix_from_rows([])
    rows = db.session.query(RolePermission).filter_by(role_id=role_id).all()
    return _matrix_from_rows(rows)


# =============================================================================
# Matrix writes
# =============================================================================

def upsert_permission(role_id: int, module: str, action: str, allowed: bool) -> RolePermission:
    """Insert or update one matrix cell. Caller owns the transaction."""
    row = db.session.query(RolePermission).filter_by(
        role_id=role_id,
        module=module,
        action=action,
    ).first()
    if row:
        row.allowed = allowed
    else:
        row = RolePermission(role_id=role_id, module=module, action=action, allowed=allowed)
        db.session.add(row)
    db.session.flush()
    return row


def _parse_allowed(value, field: str) -> bool:
    if not isinstance(value, bool):
        raise ValidationError(f"{field} must be a boolean")
    return value


def set_permission(role_id: int, module: str, action: str, allowed) -> RolePermission:
    """Single-cell update."""
    validate_module(module)
    action_value = parse_action(action).value
    allowed = _parse_allowed(allowed, "allowed")
    get_role(role_id)

    with atomic("Failed to update permission"):
        row = upsert_permission(role_id, module, action_value, allowed)
    return row


def bulk_update_permissions(role_id: int, records: list) -> list[dict]:
    """
    Upsert four cells per {module, create, edit, delete, show} record.

    All records are validated before anything is written; the writes then
    run in one transaction so a failure leaves the matrix untouched.
    """
    if not isinstance(records, list):
        raise ValidationError("permissions must be a list")

    cells: list[tuple[str, str, bool]] = []
    for record in records:
        if not isinstance(record, dict):
            raise ValidationError("Each permission record must be an object")
        module = validate_module(record.get("module"))
        missing = [action.value for action in Action if action.value not in record]
        if missing:
            raise ValidationError(f"{module}: missing {', '.join(missing)}")
        for action in Action:
            cells.append((module, action.value, _parse_allowed(record[action.value], f"{module}.{action.value}")))

    get_role(role_id)

    with atomic("Failed to update permissions"):
        for module, action, allowed in cells:
            upsert_permission(role_id, module, action, allowed)

    return get_role_permissions(role_id)


# =============================================================================
# Roles
# =============================================================================

def list_roles() -> list[Role]:
    return db.session.query(Role).order_by(Role.name.asc()).all()


def create_role(name) -> Role:
    if not isinstance(name, str) or not name.strip():
        raise ValidationError("name is required")
    name = name.strip()
    if len(name) > 64:
        raise ValidationError("name exceeds max length 64")

    if db.session.query(Role).filter_by(name=name).first():
        raise Conflict(f"Role {name!r} already exists")

    role = Role(name=name)
    db.session.add(role)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise Conflict(f"Role {name!r} already exists")
    current_app.logger.info("Role %s created", name)
    return role


def delete_role(role_id: int) -> None:
    """Delete a role and its matrix. The superadmin role is protected."""
    role = get_role(role_id)
    if is_superadmin(role.name):
        raise Forbidden("The superadmin role cannot be deleted")

    in_use = db.session.query(User.id).filter(User.role == role.name).count()
    with atomic("Failed to delete role"):
        db.session.delete(role)
    if in_use:
        # Users keep the stale role name and fall back to no permissions
        current_app.logger.warning("Role %s deleted while assigned to %d user(s)", role.name, in_use)
