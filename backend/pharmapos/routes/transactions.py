# Overview: Flask API routes for transactions operations; parses input and returns JSON responses.

from flask import Blueprint, jsonify, request

from ..decorators import require_auth, require_permission
from ..permissions import Action, Module
from ..services import sales_service
from ..validation import json_object


transactions_bp = Blueprint("transactions", __name__, url_prefix="/api/transactions")


@transactions_bp.post("")
@require_auth
@require_permission(Module.TRANSACTIONS, Action.CREATE)
def create_transaction_route():
    """Body: {outlet_id?, items: [{id, quantity, price}], total_amount}."""
    payload = json_object()
    sale = sales_service.create_sale(
        items=payload.get("items"),
        outlet_id=payload.get("outlet_id"),
        total_amount=payload.get("total_amount"),
    )
    return jsonify({"message": "Transaction recorded", "id": sale.id}), 201


@transactions_bp.get("")
@require_auth
@require_permission(Module.TRANSACTIONS, Action.SHOW)
def list_transactions_route():
    result = sales_service.list_transactions(
        page=request.args.get("page", type=int),
        limit=request.args.get("limit", type=int),
        outlet_id=request.args.get("outlet_id", type=int),
        start=request.args.get("start"),
        end=request.args.get("end"),
    )
    return jsonify(result)


@transactions_bp.get("/<int:transaction_id>")
@require_auth
@require_permission(Module.TRANSACTIONS, Action.SHOW)
def get_transaction_route(transaction_id: int):
    return jsonify(sales_service.get_transaction(transaction_id).to_dict())
