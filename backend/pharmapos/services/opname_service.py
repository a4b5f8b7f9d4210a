# backend/pharmapos/services/opname_service.py
"""
Stock opname (physical count) service.

Compares the system stock the counter saw against the physically counted
stock and, for every product that differs, sets stock to the counted value
and writes one "opname" ledger row. Matching items are left untouched.

The whole batch is one transaction: a bad item anywhere rolls back every
correction. system_stock is taken from the request as-is and is not
re-read from the database.
"""
from __future__ import annotations

from flask import current_app

from ..errors import NotFound, ValidationError
from ..extensions import db
from ..models import Product
from ..validation import parse_non_negative_int, parse_positive_int
from .concurrency import atomic, lock_for_update
from .inventory_service import append_history


def _parse_items(items) -> list[dict]:
    if not isinstance(items, list) or not items:
        raise ValidationError("items must be a non-empty list")

    parsed = []
    for index, item in enumerate(items):
        if not isinstance(item, dict):
            raise ValidationError(f"items[{index}] must be an object")
        parsed.append({
            "id": parse_positive_int(item.get("id"), f"items[{index}].id"),
            "system_stock": parse_non_negative_int(item.get("system_stock"), f"items[{index}].system_stock"),
            "actual_stock": parse_non_negative_int(item.get("actual_stock"), f"items[{index}].actual_stock"),
        })
    return parsed


def submit_opname(*, items, note=None) -> dict:
    """
    Apply a counted batch.

    Returns {"adjusted": n, "unchanged": m}.
    """
    parsed = _parse_items(items)
    note = str(note).strip()[:255] if note else None

    changes = [item for item in parsed if item["actual_stock"] != item["system_stock"]]
    if not changes:
        return {"adjusted": 0, "unchanged": len(parsed)}

    with atomic("Failed to save stock opname"):
        for item in changes:
            product = lock_for_update(
                db.session.query(Product).filter(Product.id == item["id"])
            ).first()
            if product is None:
                raise NotFound(f"Product {item['id']} not found")

            product.stock = item["actual_stock"]
            append_history(
                product_id=product.id,
                history_type="opname",
                previous_stock=item["system_stock"],
                new_stock=item["actual_stock"],
                note=note,
            )

    current_app.logger.info(
        "Stock opname saved: %d adjusted, %d unchanged", len(changes), len(parsed) - len(changes)
    )
    return {"adjusted": len(changes), "unchanged": len(parsed) - len(changes)}
