from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z, utcnow


HISTORY_TYPES = ("sale", "restock", "opname", "adjustment")


def _money(value):
    return float(value) if value is not None else None


class Product(db.Model):
    """
    Product master data with its current on-hand stock.

    stock is only changed through the inventory services so every change
    lands in inventory_history alongside it. Sales are the one path that
    may take stock below zero.
    """
    __tablename__ = "products"
    __table_args__ = (
        db.Index("ix_products_name", "name"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    stock = db.Column(db.Integer, nullable=False, default=0)
    cost_price = db.Column(db.Numeric(14, 2), nullable=False, default=0)
    selling_price = db.Column(db.Numeric(14, 2), nullable=False, default=0)
    unit = db.Column(db.String(32), nullable=True)
    category = db.Column(db.String(100), nullable=True)
    expired_date = db.Column(db.Date, nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    def __repr__(self) -> str:
        return f"<Product id={self.id} name={self.name!r} stock={self.stock}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "stock": self.stock,
            "cost_price": _money(self.cost_price),
            "selling_price": _money(self.selling_price),
            "unit": self.unit,
            "category": self.category,
            "expired_date": self.expired_date.isoformat() if self.expired_date else None,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }


class Supplier(db.Model):
    __tablename__ = "suppliers"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    contact_person = db.Column(db.String(255), nullable=True)
    phone = db.Column(db.String(32), nullable=True)
    address = db.Column(db.Text, nullable=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "contact_person": self.contact_person,
            "phone": self.phone,
            "address": self.address,
            "created_at": to_utc_z(self.created_at),
        }


class InventoryHistory(db.Model):
    """
    Append-only stock ledger. Rows are never updated or deleted.
    """
    __tablename__ = "inventory_history"
    __table_args__ = (
        db.CheckConstraint(
            "type IN ('sale', 'restock', 'opname', 'adjustment')",
            name="ck_inventory_history_type",
        ),
        db.CheckConstraint(
            "new_stock = previous_stock + quantity_change",
            name="ck_inventory_history_balance",
        ),
        db.Index("ix_inventory_history_product_created", "product_id", "created_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    product_id = db.Column(db.Integer, db.ForeignKey("products.id"), nullable=False, index=True)
    type = db.Column(db.String(16), nullable=False, index=True)

    # Signed: positive adds stock, negative removes it
    quantity_change = db.Column(db.Integer, nullable=False)
    previous_stock = db.Column(db.Integer, nullable=False)
    new_stock = db.Column(db.Integer, nullable=False)

    note = db.Column(db.String(255), nullable=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, index=True)

    product = db.relationship("Product", backref=db.backref("history", lazy="dynamic"))

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "product_id": self.product_id,
            "product_name": self.product.name if self.product else None,
            "type": self.type,
            "quantity_change": self.quantity_change,
            "previous_stock": self.previous_stock,
            "new_stock": self.new_stock,
            "note": self.note,
            "created_at": to_utc_z(self.created_at),
        }
