from __future__ import annotations

from ..extensions import db


class Setting(db.Model):
    """Key/value store for transaction settings (tax and discount rates)."""
    __tablename__ = "settings"

    key = db.Column(db.String(64), primary_key=True)
    value = db.Column(db.String(255), nullable=False)

    def to_dict(self) -> dict:
        return {"key": self.key, "value": self.value}
