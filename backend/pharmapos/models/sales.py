from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z, utcnow


def _money(value):
    return float(value) if value is not None else None


class Transaction(db.Model):
    """
    A completed sale at an outlet.

    total_amount is what the cashier charged (after tax and discount), so it
    is not necessarily the sum of the item lines.
    """
    __tablename__ = "transactions"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    outlet_id = db.Column(db.Integer, db.ForeignKey("outlets.id", ondelete="SET NULL"), nullable=True, index=True)
    total_amount = db.Column(db.Numeric(14, 2), nullable=False)
    transaction_date = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, index=True)

    outlet = db.relationship("Outlet", backref=db.backref("transactions", lazy=True))
    items = db.relationship(
        "TransactionItem",
        backref="transaction",
        lazy=True,
        cascade="all, delete-orphan",
        order_by="TransactionItem.id",
    )

    def to_dict(self, include_items: bool = True) -> dict:
        data = {
            "id": self.id,
            "outlet_id": self.outlet_id,
            "outlet_name": self.outlet.name if self.outlet else None,
            "total_amount": _money(self.total_amount),
            "transaction_date": to_utc_z(self.transaction_date),
        }
        if include_items:
            data["items"] = [item.to_dict() for item in self.items]
        return data


class TransactionItem(db.Model):
    __tablename__ = "transaction_items"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    transaction_id = db.Column(
        db.Integer,
        db.ForeignKey("transactions.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    product_id = db.Column(db.Integer, db.ForeignKey("products.id"), nullable=False, index=True)
    quantity = db.Column(db.Integer, nullable=False)

    # Unit price at the time of sale
    price = db.Column(db.Numeric(14, 2), nullable=False)

    product = db.relationship("Product")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "product_id": self.product_id,
            "product_name": self.product.name if self.product else None,
            "quantity": self.quantity,
            "price": _money(self.price),
        }
