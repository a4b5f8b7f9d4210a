# Overview: Service-layer operations for products; encapsulates business logic and database work.

from __future__ import annotations

from flask import current_app

from ..errors import Conflict, NotFound
from ..extensions import db
from ..models import InventoryHistory, Product, TransactionItem
from ..validation import ModelValidationPolicy, enforce_rules_product, validate_payload
from .concurrency import atomic, lock_for_update
from .inventory_service import append_history
from .pagination import paginate


PRODUCT_POLICY = ModelValidationPolicy(
    writable_fields={
        "name",
        "stock",
        "cost_price",
        "selling_price",
        "unit",
        "category",
        "expired_date",
    },
    required_on_create={"name", "cost_price", "selling_price"},
)

# Mutable fields (stock is handled separately so the change is logged)
PRODUCT_MUTABLE_FIELDS = PRODUCT_POLICY.writable_fields - {"stock"}


def apply_product_patch(p: Product, patch: dict) -> None:
    for k, v in patch.items():
        if k not in PRODUCT_MUTABLE_FIELDS:
            continue
        setattr(p, k, v)


def validate_product_payload(payload: dict, *, partial: bool) -> dict:
    patch = validate_payload(model=Product, payload=payload, policy=PRODUCT_POLICY, partial=partial)
    enforce_rules_product(patch)
    return patch


def list_products(*, page=None, limit=None, search: str | None = None) -> dict:
    """Paginated product listing, alphabetical, optionally filtered by name or category."""
    query = db.session.query(Product)
    if search:
        pattern = f"%{search.strip()}%"
        query = query.filter(db.or_(Product.name.ilike(pattern), Product.category.ilike(pattern)))
    query = query.order_by(Product.name.asc(), Product.id.asc())
    return paginate(query, page=page, limit=limit, serialize=lambda p: p.to_dict())


def get_product(product_id: int) -> Product:
    p = db.session.query(Product).filter(Product.id == product_id).first()
    if not p:
        raise NotFound("Product not found")
    return p


def create_product(*, patch: dict) -> Product:
    """
    Create product using a validated patch dict.

    The stock given here is the product's initial stock and is not logged.
    """
    p = Product(stock=patch.get("stock") or 0)
    apply_product_patch(p, patch)
    with atomic("Failed to create product"):
        db.session.add(p)
    current_app.logger.info("Product %s created (%s)", p.id, p.name)
    return p


def update_product(*, product_id: int, patch: dict) -> Product:
    """
    Update a product.

    A stock change is recorded as an adjustment in the same transaction.
    """
    with atomic("Failed to update product"):
        p = (
            lock_for_update(db.session.query(Product).filter(Product.id == product_id))
            .populate_existing()
            .first()
        )
        if not p:
            raise NotFound("Product not found")
        apply_product_patch(p, patch)

        new_stock = patch.get("stock")
        if new_stock is not None and new_stock != p.stock:
            append_history(
                product_id=p.id,
                history_type="adjustment",
                previous_stock=p.stock,
                new_stock=new_stock,
                note="Product edit",
            )
            p.stock = new_stock
    return p


def delete_product(*, product_id: int) -> None:
    """
    Hard-delete a product that has never been sold or moved.

    Products referenced by sales or by the stock ledger are kept so history
    stays intact.
    """
    p = get_product(product_id)

    sold = db.session.query(TransactionItem.id).filter(TransactionItem.product_id == p.id).first()
    logged = db.session.query(InventoryHistory.id).filter(InventoryHistory.product_id == p.id).first()
    if sold or logged:
        raise Conflict("Product has sales or stock history and cannot be deleted")

    with atomic("Failed to delete product"):
        db.session.delete(p)
    current_app.logger.info("Product %s deleted", product_id)
