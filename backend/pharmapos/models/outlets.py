from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z


OUTLET_STATUSES = ("Active", "Inactive")


class Outlet(db.Model):
    """
    A physical pharmacy branch.

    Users are assigned to an outlet and sales record the outlet they were
    rung up at. An outlet that is still referenced cannot be deleted.
    """
    __tablename__ = "outlets"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(120), nullable=False)
    location = db.Column(db.String(255), nullable=False)
    status = db.Column(db.String(16), nullable=False, default="Active")
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    def __repr__(self) -> str:
        return f"<Outlet id={self.id} name={self.name!r}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "location": self.location,
            "status": self.status,
            "created_at": to_utc_z(self.created_at),
        }
