# Overview: Service-layer operations for bootstrap; encapsulates business logic and database work.

"""
Idempotent database bootstrap.

Runs at startup (BOOTSTRAP_ON_STARTUP) and from `flask system init`:
1. create missing tables
2. add model columns missing from existing tables (additive only)
3. legacy data fix-ups
4. seed roles, the default permission matrix, the superadmin account and
   transaction settings

Every step checks before it writes, so running it twice changes nothing.
"""

from __future__ import annotations

from flask import current_app
from sqlalchemy import inspect, text

from ..config import DEFAULT_SUPERADMIN_PASSWORD
from ..extensions import db
from ..models import Role, RolePermission, Setting, User
from ..permissions import DEFAULT_ROLE_PERMISSIONS, DEFAULT_ROLES, SUPERADMIN_ROLE
from .auth_service import hash_password
from .settings_service import TRANSACTION_SETTINGS


LEGACY_ROLE_NAMES = {"Casier": "Cashier"}


def add_missing_columns() -> list[str]:
    """
    ALTER TABLE ... ADD COLUMN for every mapped column missing from an
    existing table. Columns are added nullable; scalar Python defaults are
    backfilled into existing rows.
    """
    added: list[str] = []
    inspector = inspect(db.engine)

    with db.engine.begin() as conn:
        preparer = conn.dialect.identifier_preparer
        for table in db.metadata.sorted_tables:
            if not inspector.has_table(table.name):
                continue
            existing = {col["name"] for col in inspector.get_columns(table.name)}
            for column in table.columns:
                if column.name in existing or column.primary_key:
                    continue
                col_type = column.type.compile(dialect=conn.dialect)
                conn.execute(text(
                    f"ALTER TABLE {preparer.quote(table.name)} "
                    f"ADD COLUMN {preparer.quote(column.name)} {col_type}"
                ))
                if column.default is not None and column.default.is_scalar:
                    conn.execute(table.update().values({column.name: column.default.arg}))
                added.append(f"{table.name}.{column.name}")

    for name in added:
        current_app.logger.info("Added missing column %s", name)
    return added


def fix_legacy_role_names() -> int:
    """Rename misspelled roles and point their users at the corrected name."""
    fixed = 0
    for legacy, correct in LEGACY_ROLE_NAMES.items():
        legacy_role = db.session.query(Role).filter_by(name=legacy).first()
        if legacy_role and not db.session.query(Role).filter_by(name=correct).first():
            legacy_role.name = correct
            fixed += 1
        elif legacy_role:
            # Both exist: keep the correct one
            db.session.delete(legacy_role)
            fixed += 1
        fixed += (
            db.session.query(User)
            .filter(User.role == legacy)
            .update({User.role: correct}, synchronize_session=False)
        )
    db.session.commit()
    if fixed:
        current_app.logger.info("Fixed %d legacy role reference(s)", fixed)
    return fixed


def seed_roles() -> int:
    created = 0
    for name in DEFAULT_ROLES:
        if not db.session.query(Role).filter_by(name=name).first():
            db.session.add(Role(name=name))
            created += 1
    db.session.commit()
    return created


def seed_default_permissions() -> int:
    """
    Grant each default role its default cells.

    Only missing cells are written, so matrix edits made by an
    administrator survive a restart.
    """
    created = 0
    for role_name, modules in DEFAULT_ROLE_PERMISSIONS.items():
        role = db.session.query(Role).filter_by(name=role_name).first()
        if not role:
            continue
        existing = {
            (row.module, row.action)
            for row in db.session.query(RolePermission).filter_by(role_id=role.id).all()
        }
        for module, actions in modules.items():
            for action in actions:
                if (module, action) in existing:
                    continue
                db.session.add(RolePermission(role_id=role.id, module=module, action=action, allowed=True))
                created += 1
    db.session.commit()
    return created


def seed_superadmin() -> bool:
    """Create the superadmin account when no superadmin exists."""
    if db.session.query(User).filter_by(role=SUPERADMIN_ROLE).first():
        return False

    username = current_app.config.get("SUPERADMIN_USERNAME", "superadmin")
    if db.session.query(User).filter_by(username=username).first():
        current_app.logger.warning("Username %s is taken; superadmin account not seeded", username)
        return False

    password = current_app.config["SUPERADMIN_PASSWORD"]
    if password == DEFAULT_SUPERADMIN_PASSWORD:
        current_app.logger.warning(
            "Superadmin %s seeded with the default password; set SUPERADMIN_PASSWORD "
            "or change it after the first login",
            username,
        )

    user = User(
        username=username,
        password_hash=hash_password(password),
        role=SUPERADMIN_ROLE,
        status="active",
    )
    db.session.add(user)
    db.session.commit()
    current_app.logger.info("Seeded superadmin account %s", username)
    return True


def seed_settings() -> int:
    created = 0
    for key, default in TRANSACTION_SETTINGS.items():
        if not db.session.query(Setting).filter_by(key=key).first():
            db.session.add(Setting(key=key, value=default))
            created += 1
    db.session.commit()
    return created


def bootstrap_database() -> dict:
    """Run every bootstrap step and return what each one changed."""
    db.create_all()
    summary = {
        "columns_added": add_missing_columns(),
        "legacy_fixes": fix_legacy_role_names(),
        "roles_created": seed_roles(),
        "permissions_created": seed_default_permissions(),
        "superadmin_created": seed_superadmin(),
        "settings_created": seed_settings(),
    }
    current_app.logger.info("Database bootstrap complete: %s", summary)
    return summary
