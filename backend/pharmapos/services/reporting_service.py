# Overview: Service-layer operations for reporting; encapsulates business logic and database work.

"""
Read-only reports: profit and loss, balance sheet, transaction report and
the dashboard summary.

COGS is valued at each product's current cost_price. Stock opname
variances count as cost: a shortfall adds to COGS and a surplus reduces it.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from decimal import Decimal

from sqlalchemy import func

from ..errors import ValidationError
from ..extensions import db
from ..models import InventoryHistory, Outlet, Product, Transaction, TransactionItem, User
from ..time_utils import day_bounds, month_bounds, parse_date, to_utc_z, utcnow


CENT = Decimal("0.01")
CASHIER_ROLE = "Cashier"
LOW_STOCK_LIMIT = 5
EARNING_WEEKS = 4


def _money(value) -> Decimal:
    if value is None:
        return Decimal("0.00")
    return Decimal(str(value)).quantize(CENT)


def _in_range(column, start: datetime | None, end: datetime | None):
    clauses = []
    if start is not None:
        clauses.append(column >= start)
    if end is not None:
        clauses.append(column < end)
    return clauses


def _revenue(start: datetime | None = None, end: datetime | None = None) -> Decimal:
    total = (
        db.session.query(func.coalesce(func.sum(Transaction.total_amount), 0))
        .filter(*_in_range(Transaction.transaction_date, start, end))
        .scalar()
    )
    return _money(total)


def _sales_cogs(start: datetime | None = None, end: datetime | None = None) -> Decimal:
    total = (
        db.session.query(func.coalesce(func.sum(TransactionItem.quantity * Product.cost_price), 0))
        .join(Transaction, Transaction.id == TransactionItem.transaction_id)
        .join(Product, Product.id == TransactionItem.product_id)
        .filter(*_in_range(Transaction.transaction_date, start, end))
        .scalar()
    )
    return _money(total)


def _opname_variance(start: datetime | None = None, end: datetime | None = None) -> tuple[Decimal, Decimal]:
    """(loss, gain) of stock opname corrections, valued at cost."""
    base = (
        db.session.query(func.coalesce(func.sum(InventoryHistory.quantity_change * Product.cost_price), 0))
        .join(Product, Product.id == InventoryHistory.product_id)
        .filter(InventoryHistory.type == "opname")
        .filter(*_in_range(InventoryHistory.created_at, start, end))
    )
    shortfall = base.filter(InventoryHistory.quantity_change < 0).scalar()
    surplus = base.filter(InventoryHistory.quantity_change > 0).scalar()
    return -_money(shortfall), _money(surplus)


def _cogs(start: datetime | None = None, end: datetime | None = None) -> tuple[Decimal, list[dict]]:
    sales_cogs = _sales_cogs(start, end)
    loss, gain = _opname_variance(start, end)
    details = [
        {"label": "Cost of goods sold", "amount": float(sales_cogs)},
        {"label": "Stock opname shortfall", "amount": float(loss)},
        {"label": "Stock opname surplus", "amount": float(-gain)},
    ]
    return sales_cogs + loss - gain, details


def profit_loss(*, month: int, year: int) -> dict:
    """Income statement for one calendar month."""
    if not 1 <= month <= 12:
        raise ValidationError("month must be between 1 and 12")
    if not 1970 <= year <= 9999:
        raise ValidationError("year is out of range")

    start, end = month_bounds(year, month)
    revenue = _revenue(start, end)
    cogs_total, cogs_details = _cogs(start, end)
    gross_profit = revenue - cogs_total
    expenses = Decimal("0.00")

    return {
        "period": {"month": month, "year": year},
        "revenue": {
            "total": float(revenue),
            "details": [{"label": "Sales", "amount": float(revenue)}],
        },
        "cogs": {"total": float(cogs_total), "details": cogs_details},
        "gross_profit": float(gross_profit),
        "expenses": {"total": float(expenses), "details": []},
        "net_profit": float(gross_profit - expenses),
    }


def balance_sheet() -> dict:
    """
    Snapshot balance sheet.

    Cash is all-time sales and inventory is on-hand stock at cost. Initial
    equity is back-solved so assets always equal liabilities plus equity.
    """
    cash = _revenue()
    inventory = _money(
        db.session.query(func.coalesce(func.sum(Product.stock * Product.cost_price), 0))
        .filter(Product.stock > 0)
        .scalar()
    )
    receivables = Decimal("0.00")
    total_assets = cash + inventory + receivables

    payables = Decimal("0.00")
    consignment_debt = Decimal("0.00")
    total_liabilities = payables + consignment_debt

    cogs_total, _ = _cogs()
    retained_earnings = cash - cogs_total
    capital_changes = Decimal("0.00")
    initial = total_assets - total_liabilities - retained_earnings - capital_changes

    return {
        "as_of": to_utc_z(utcnow()),
        "assets": {
            "cash": float(cash),
            "inventory": float(inventory),
            "receivables": float(receivables),
            "total": float(total_assets),
        },
        "liabilities": {
            "payables": float(payables),
            "consignmentDebt": float(consignment_debt),
            "total": float(total_liabilities),
        },
        "equity": {
            "initial": float(initial),
            "capitalChanges": float(capital_changes),
            "retainedEarnings": float(retained_earnings),
            "total": float(initial + capital_changes + retained_earnings),
        },
    }


def transaction_report(*, start_date: str | None, end_date: str | None) -> dict:
    """Sales with their lines between two dates (inclusive), plus a daily total series."""
    try:
        start_day = parse_date(start_date)
        end_day = parse_date(end_date)
    except ValueError:
        raise ValidationError("startDate and endDate must be dates (YYYY-MM-DD)")

    today = utcnow().date()
    end_day = end_day or today
    start_day = start_day or end_day - timedelta(days=29)
    if start_day > end_day:
        raise ValidationError("startDate must not be after endDate")

    start, end = day_bounds(start_day, end_day)
    sales = (
        db.session.query(Transaction)
        .filter(*_in_range(Transaction.transaction_date, start, end))
        .order_by(Transaction.transaction_date.desc(), Transaction.id.desc())
        .all()
    )

    rows = []
    daily: dict[str, Decimal] = {}
    for sale in sales:
        amount = _money(sale.total_amount)
        rows.append({
            "id": sale.id,
            "transaction_date": to_utc_z(sale.transaction_date),
            "outlet_name": sale.outlet.name if sale.outlet else None,
            "total_amount": float(amount),
            "items": [
                {
                    "product_name": item.product.name if item.product else None,
                    "quantity": item.quantity,
                    "price": float(_money(item.price)),
                }
                for item in sale.items
            ],
        })
        day = sale.transaction_date.date().isoformat()
        daily[day] = daily.get(day, Decimal("0.00")) + amount

    return {
        "startDate": start_day.isoformat(),
        "endDate": end_day.isoformat(),
        "transactions": rows,
        "chartData": [{"date": day, "total": float(total)} for day, total in sorted(daily.items())],
    }


def _weekly_earnings(now: datetime) -> list[dict]:
    """Revenue for the last four 7-day windows, oldest first."""
    buckets: dict[str, Decimal] = {}
    window_end = datetime(now.year, now.month, now.day) + timedelta(days=1)
    window_start = window_end - timedelta(days=7 * EARNING_WEEKS)

    for week in range(EARNING_WEEKS):
        buckets[f"Week {week + 1}"] = Decimal("0.00")

    sales = (
        db.session.query(Transaction.transaction_date, Transaction.total_amount)
        .filter(*_in_range(Transaction.transaction_date, window_start, window_end))
        .all()
    )
    for sold_at, amount in sales:
        index = min((sold_at.replace(tzinfo=None) - window_start).days // 7, EARNING_WEEKS - 1)
        buckets[f"Week {index + 1}"] += _money(amount)

    return [{"name": name, "value": float(value)} for name, value in buckets.items()]


def dashboard() -> dict:
    low_stock = (
        db.session.query(Product)
        .order_by(Product.stock.asc(), Product.name.asc())
        .limit(LOW_STOCK_LIMIT)
        .all()
    )

    cashiers = (
        db.session.query(User)
        .filter(User.role == CASHIER_ROLE, User.status == "active")
        .order_by(User.username.asc())
        .all()
    )

    rosters: dict[int, list[str]] = {}
    for cashier in cashiers:
        if cashier.outlet_id is not None:
            rosters.setdefault(cashier.outlet_id, []).append(cashier.username)

    outlets = db.session.query(Outlet).order_by(Outlet.name.asc()).all()

    return {
        "stockRecommendations": [{"id": p.id, "name": p.name, "count": p.stock} for p in low_stock],
        "earnings": _weekly_earnings(utcnow()),
        "outlets": [
            {
                "id": outlet.id,
                "name": outlet.name,
                "location": outlet.location,
                "cashiers": rosters.get(outlet.id, []),
            }
            for outlet in outlets
        ],
        "cashiers": [
            {
                "id": cashier.id,
                "username": cashier.username,
                "outlet_name": cashier.outlet.name if cashier.outlet else None,
                "description": f"Cashier at {cashier.outlet.name}" if cashier.outlet else "Cashier",
            }
            for cashier in cashiers
        ],
    }
