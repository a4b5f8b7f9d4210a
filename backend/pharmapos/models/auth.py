from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z


USER_STATUSES = ("active", "inactive")


class User(db.Model):
    """
    Staff accounts.

    role is the name of a Role row (denormalized); the reserved name
    "superadmin" is resolved without a row.
    """
    __tablename__ = "users"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(64), nullable=False, unique=True, index=True)

    # Bcrypt hashed password
    password_hash = db.Column(db.String(255), nullable=False)

    role = db.Column(db.String(64), nullable=False)
    outlet_id = db.Column(db.Integer, db.ForeignKey("outlets.id", ondelete="SET NULL"), nullable=True, index=True)
    status = db.Column(db.String(16), nullable=False, default="active")

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    outlet = db.relationship("Outlet", backref=db.backref("users", lazy=True))

    @property
    def is_active(self) -> bool:
        return self.status == "active"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "username": self.username,
            "role": self.role,
            "outlet_id": self.outlet_id,
            "outlet_name": self.outlet.name if self.outlet else None,
            "status": self.status,
            "created_at": to_utc_z(self.created_at),
        }


class Role(db.Model):
    __tablename__ = "roles"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(64), nullable=False, unique=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    permissions = db.relationship(
        "RolePermission",
        backref="role",
        lazy=True,
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
        }


class RolePermission(db.Model):
    """One cell of the role x module x action allow matrix."""
    __tablename__ = "role_permissions"
    __table_args__ = (
        db.UniqueConstraint("role_id", "module", "action", name="uq_role_permissions_role_module_action"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    role_id = db.Column(db.Integer, db.ForeignKey("roles.id", ondelete="CASCADE"), nullable=False, index=True)
    module = db.Column(db.String(64), nullable=False)
    action = db.Column(db.String(16), nullable=False)
    allowed = db.Column(db.Boolean, nullable=False, default=False)

    def to_dict(self) -> dict:
        return {
            "role_id": self.role_id,
            "module": self.module,
            "action": self.action,
            "allowed": self.allowed,
        }
