# Overview: Flask API routes for reports operations; parses input and returns JSON responses.

from flask import Blueprint, jsonify, request

from ..decorators import require_auth, require_permission
from ..permissions import Action, Module
from ..services import reporting_service
from ..time_utils import utcnow


reports_bp = Blueprint("reports", __name__, url_prefix="/api")


@reports_bp.get("/financial/profit-loss")
@require_auth
@require_permission(Module.SALES_REPORT, Action.SHOW)
def profit_loss_route():
    now = utcnow()
    month = request.args.get("month", default=now.month, type=int)
    year = request.args.get("year", default=now.year, type=int)
    return jsonify(reporting_service.profit_loss(month=month, year=year))


@reports_bp.get("/reports/balance")
@require_auth
@require_permission(Module.SALES_REPORT, Action.SHOW)
def balance_sheet_route():
    return jsonify(reporting_service.balance_sheet())


@reports_bp.get("/reports/transactions")
@require_auth
@require_permission(Module.SALES_REPORT, Action.SHOW)
def transaction_report_route():
    return jsonify(reporting_service.transaction_report(
        start_date=request.args.get("startDate"),
        end_date=request.args.get("endDate"),
    ))


@reports_bp.get("/dashboard")
@require_auth
def dashboard_route():
    return jsonify(reporting_service.dashboard())
