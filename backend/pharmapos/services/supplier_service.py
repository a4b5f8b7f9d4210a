# Overview: Service-layer operations for suppliers; encapsulates business logic and database work.

from __future__ import annotations

from ..errors import NotFound
from ..extensions import db
from ..models import Supplier
from ..validation import ModelValidationPolicy, validate_payload
from .concurrency import atomic
from .pagination import paginate


SUPPLIER_POLICY = ModelValidationPolicy(
    writable_fields={"name", "contact_person", "phone", "address"},
    required_on_create={"name"},
)


def validate_supplier_payload(payload: dict, *, partial: bool) -> dict:
    return validate_payload(model=Supplier, payload=payload, policy=SUPPLIER_POLICY, partial=partial)


def list_suppliers(*, page=None, limit=None, search: str | None = None) -> dict:
    query = db.session.query(Supplier)
    if search:
        pattern = f"%{search.strip()}%"
        query = query.filter(db.or_(Supplier.name.ilike(pattern), Supplier.contact_person.ilike(pattern)))
    query = query.order_by(Supplier.name.asc(), Supplier.id.asc())
    return paginate(query, page=page, limit=limit, serialize=lambda s: s.to_dict())


def get_supplier(supplier_id: int) -> Supplier:
    supplier = db.session.query(Supplier).filter_by(id=supplier_id).first()
    if not supplier:
        raise NotFound("Supplier not found")
    return supplier


def create_supplier(*, patch: dict) -> Supplier:
    supplier = Supplier(**patch)
    with atomic("Failed to create supplier"):
        db.session.add(supplier)
    return supplier


def update_supplier(*, supplier_id: int, patch: dict) -> Supplier:
    with atomic("Failed to update supplier"):
        supplier = get_supplier(supplier_id)
        for key, value in patch.items():
            setattr(supplier, key, value)
    return supplier


def delete_supplier(*, supplier_id: int) -> None:
    with atomic("Failed to delete supplier"):
        db.session.delete(get_supplier(supplier_id))
