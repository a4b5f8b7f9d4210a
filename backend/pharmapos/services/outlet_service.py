# Overview: Service-layer operations for outlets; encapsulates business logic and database work.

"""
Outlet (branch) management.

An outlet cannot be deleted while a user is assigned to it or a sale
references it.
"""

from __future__ import annotations

from flask import current_app

from ..errors import Conflict, NotFound
from ..extensions import db
from ..models import Outlet, Transaction, User
from ..models.outlets import OUTLET_STATUSES
from ..validation import ModelValidationPolicy, enforce_choice, validate_payload
from .concurrency import atomic


OUTLET_POLICY = ModelValidationPolicy(
    writable_fields={"name", "location", "status"},
    required_on_create={"name", "location"},
)


def validate_outlet_payload(payload: dict, *, partial: bool) -> dict:
    patch = validate_payload(model=Outlet, payload=payload, policy=OUTLET_POLICY, partial=partial)
    enforce_choice(patch, "status", OUTLET_STATUSES)
    return patch


def list_outlets() -> list[Outlet]:
    return db.session.query(Outlet).order_by(Outlet.name.asc(), Outlet.id.asc()).all()


def get_outlet(outlet_id: int) -> Outlet:
    outlet = db.session.query(Outlet).filter_by(id=outlet_id).first()
    if not outlet:
        raise NotFound("Outlet not found")
    return outlet


def create_outlet(*, patch: dict) -> Outlet:
    outlet = Outlet(**patch)
    with atomic("Failed to create outlet"):
        db.session.add(outlet)
    current_app.logger.info("Outlet %s created (%s)", outlet.id, outlet.name)
    return outlet


def update_outlet(*, outlet_id: int, patch: dict) -> Outlet:
    with atomic("Failed to update outlet"):
        outlet = get_outlet(outlet_id)
        for key, value in patch.items():
            setattr(outlet, key, value)
    return outlet


def delete_outlet(*, outlet_id: int) -> None:
    outlet = get_outlet(outlet_id)

    users = db.session.query(User.id).filter(User.outlet_id == outlet.id).count()
    sales = db.session.query(Transaction.id).filter(Transaction.outlet_id == outlet.id).count()
    if users or sales:
        raise Conflict(
            f"Outlet is still referenced by {users} user(s) and {sales} transaction(s)"
        )

    with atomic("Failed to delete outlet"):
        db.session.delete(outlet)
    current_app.logger.info("Outlet %s deleted", outlet_id)
