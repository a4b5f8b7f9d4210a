# Overview: Service-layer operations for sales; encapsulates business logic and database work.

"""
Sale processor.

A sale writes the transaction header, one line per cart item, and a stock
decrement per line, all in one transaction.

Policy:
- There is no stock sufficiency check; stock may go negative, which is the
  visible sign of an oversold item.
- No inventory_history rows are written unless RECORD_SALE_HISTORY is on.
"""

from __future__ import annotations

from decimal import Decimal

from flask import current_app

from ..errors import EmptyCart, NotFound, ValidationError
from ..extensions import db
from ..models import Outlet, Product, Transaction, TransactionItem
from ..time_utils import parse_iso_datetime
from ..validation import parse_amount, parse_int, parse_positive_int
from .concurrency import atomic
from .inventory_service import append_history, apply_stock_delta
from .pagination import paginate


def _parse_cart(items) -> list[dict]:
    if items is None or (isinstance(items, list) and not items):
        raise EmptyCart("Cart is empty")
    if not isinstance(items, list):
        raise ValidationError("items must be a list")

    cart = []
    for index, item in enumerate(items):
        if not isinstance(item, dict):
            raise ValidationError(f"items[{index}] must be an object")
        cart.append({
            "id": parse_positive_int(item.get("id"), f"items[{index}].id"),
            "quantity": parse_positive_int(item.get("quantity"), f"items[{index}].quantity"),
            "price": parse_amount(item.get("price"), f"items[{index}].price"),
        })
    return cart


def create_sale(*, items, outlet_id=None, total_amount=None) -> Transaction:
    """
    Record a sale.

    total_amount is what was charged; when omitted it is the sum of
    quantity x price over the cart.
    """
    cart = _parse_cart(items)

    if outlet_id in (None, ""):
        outlet_id = None
    else:
        outlet_id = parse_positive_int(outlet_id, "outlet_id")

    if total_amount is None:
        total = sum((line["price"] * line["quantity"] for line in cart), Decimal("0"))
    else:
        total = parse_amount(total_amount, "total_amount")

    record_history = current_app.config.get("RECORD_SALE_HISTORY", False)

    with atomic("Failed to record transaction"):
        if outlet_id is not None and not db.session.query(Outlet.id).filter(Outlet.id == outlet_id).first():
            raise NotFound("Outlet not found")

        sale = Transaction(outlet_id=outlet_id, total_amount=total)
        db.session.add(sale)
        db.session.flush()

        for line in cart:
            if apply_stock_delta(line["id"], -line["quantity"], allow_negative=True) == 0:
                raise NotFound(f"Product {line['id']} not found")

            db.session.add(TransactionItem(
                transaction_id=sale.id,
                product_id=line["id"],
                quantity=line["quantity"],
                price=line["price"],
            ))

            if record_history:
                new_stock = db.session.query(Product.stock).filter(Product.id == line["id"]).scalar()
                append_history(
                    product_id=line["id"],
                    history_type="sale",
                    previous_stock=new_stock + line["quantity"],
                    new_stock=new_stock,
                    note=f"Transaction #{sale.id}",
                )

    current_app.logger.info("Transaction %s recorded: %d item(s), total %s", sale.id, len(cart), total)
    return sale


def list_transactions(*, page=None, limit=None, outlet_id=None, start=None, end=None) -> dict:
    """Sales newest first, optionally filtered by outlet and ISO date range."""
    try:
        start_dt = parse_iso_datetime(start)
        end_dt = parse_iso_datetime(end)
    except ValueError:
        raise ValidationError("start and end must be ISO-8601 datetimes")

    query = db.session.query(Transaction)
    if outlet_id is not None:
        query = query.filter(Transaction.outlet_id == parse_int(outlet_id, "outlet_id"))
    if start_dt:
        query = query.filter(Transaction.transaction_date >= start_dt)
    if end_dt:
        query = query.filter(Transaction.transaction_date <= end_dt)
    query = query.order_by(Transaction.transaction_date.desc(), Transaction.id.desc())
    return paginate(query, page=page, limit=limit, serialize=lambda t: t.to_dict())


def get_transaction(transaction_id: int) -> Transaction:
    sale = db.session.query(Transaction).filter_by(id=transaction_id).first()
    if not sale:
        raise NotFound("Transaction not found")
    return sale
