# Overview: Service-layer operations for settings; encapsulates business logic and database work.

from __future__ import annotations

from decimal import Decimal

from ..errors import ValidationError
from ..extensions import db
from ..models import Setting
from ..validation import parse_percent
from .concurrency import atomic


# Transaction settings and their defaults (percent, 0-100)
TRANSACTION_SETTINGS = {
    "ppn_rate": "0",
    "discount_rate": "0",
}


def get_settings() -> dict:
    stored = {row.key: row.value for row in db.session.query(Setting).all()}
    return {
        key: float(Decimal(stored.get(key, default)))
        for key, default in TRANSACTION_SETTINGS.items()
    }


def update_settings(payload: dict) -> dict:
    """Upsert any of ppn_rate / discount_rate."""
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")

    unknown = sorted(set(payload) - set(TRANSACTION_SETTINGS))
    if unknown:
        raise ValidationError(f"Field not allowed: {unknown[0]}")

    rates = {key: parse_percent(value, key) for key, value in payload.items()}

    with atomic("Failed to update settings"):
        for key, rate in rates.items():
            row = db.session.query(Setting).filter_by(key=key).first()
            if row:
                row.value = str(rate)
            else:
                db.session.add(Setting(key=key, value=str(rate)))

    return get_settings()
