# Overview: Service-layer operations for inventory; encapsulates business logic and database work.

"""
Stock ledger.

Every stock change made here writes exactly one inventory_history row in
the same transaction, and each row satisfies
new_stock == previous_stock + quantity_change.

The reduce path is a single conditional UPDATE
(stock = stock - q WHERE id = ? AND stock >= q) checked by row count, so
two concurrent reductions can never take stock below zero.
"""

from __future__ import annotations

from flask import current_app

from ..errors import InsufficientStock, NotFound, ValidationError
from ..extensions import db
from ..models import InventoryHistory, Product
from ..validation import MAX_INT, parse_int, parse_positive_int
from .concurrency import atomic, lock_for_update
from .pagination import paginate


ADJUST_ADD = "add"
ADJUST_REDUCE = "reduce"
ADJUST_DIRECTIONS = (ADJUST_ADD, ADJUST_REDUCE)


def append_history(
    *,
    product_id: int,
    history_type: str,
    previous_stock: int,
    new_stock: int,
    note: str | None = None,
) -> InventoryHistory:
    """Stage one ledger row. Caller owns the transaction."""
    entry = InventoryHistory(
        product_id=product_id,
        type=history_type,
        quantity_change=new_stock - previous_stock,
        previous_stock=previous_stock,
        new_stock=new_stock,
        note=note,
    )
    db.session.add(entry)
    return entry


def apply_stock_delta(product_id: int, delta: int, *, allow_negative: bool) -> int:
    """
    Add delta to a product's stock with one UPDATE statement.

    With allow_negative=False a decrement only applies while stock >= -delta.
    Returns the number of rows changed (0 or 1). Caller owns the transaction.
    """
    query = db.session.query(Product).filter(Product.id == product_id)
    if delta < 0 and not allow_negative:
        query = query.filter(Product.stock >= -delta)
    return query.update(
        {Product.stock: Product.stock + delta},
        synchronize_session=False,
    )


def _clean_note(note) -> str | None:
    if note is None:
        return None
    note = str(note).strip()
    if len(note) > 255:
        raise ValidationError("note exceeds max length 255")
    return note or None


def adjust_stock(*, product_id, direction, quantity, note=None) -> dict:
    """
    Manual stock adjustment.

    add: stock += quantity. reduce: stock -= quantity, refused with
    InsufficientStock when quantity exceeds the current stock.

    Returns {"product_id", "previous_stock", "newStock", "history_id"}.
    """
    if direction not in ADJUST_DIRECTIONS:
        raise ValidationError("type must be one of: add, reduce")
    product_id = parse_positive_int(product_id, "productId")
    quantity = parse_positive_int(quantity, "quantity")
    note = _clean_note(note)

    delta = quantity if direction == ADJUST_ADD else -quantity

    with atomic("Failed to adjust stock"):
        product = lock_for_update(db.session.query(Product).filter(Product.id == product_id)).first()
        if product is None:
            raise NotFound("Product not found")
        if product.stock + delta > MAX_INT:
            raise ValidationError(f"Stock for {product.name} would exceed {MAX_INT:,}")

        updated = apply_stock_delta(product_id, delta, allow_negative=False)
        if updated == 0:
            raise InsufficientStock(
                f"Insufficient stock for {product.name}: requested {quantity}, available {product.stock}"
            )

        db.session.refresh(product)
        new_stock = product.stock
        entry = append_history(
            product_id=product_id,
            history_type="adjustment",
            previous_stock=new_stock - delta,
            new_stock=new_stock,
            note=note,
        )
        db.session.flush()
        history_id = entry.id

    current_app.logger.info(
        "Stock adjusted: product=%s %s %s -> %s", product_id, direction, quantity, new_stock
    )
    return {
        "product_id": product_id,
        "previous_stock": new_stock - delta,
        "newStock": new_stock,
        "history_id": history_id,
    }


def list_history(*, product_id: int | None = None, history_type: str | None = None, page=None, limit=None) -> dict:
    """Ledger rows, newest first."""
    query = db.session.query(InventoryHistory)
    if product_id is not None:
        query = query.filter(InventoryHistory.product_id == parse_int(product_id, "productId"))
    if history_type:
        query = query.filter(InventoryHistory.type == history_type)
    query = query.order_by(InventoryHistory.created_at.desc(), InventoryHistory.id.desc())
    return paginate(query, page=page, limit=limit, serialize=lambda row: row.to_dict())
