# Overview: Flask API routes for inventory operations; parses input and returns JSON responses.

from flask import Blueprint, jsonify, request

from ..decorators import require_auth, require_permission
from ..permissions import Action, Module
from ..services import inventory_service
from ..validation import json_object


inventory_bp = Blueprint("inventory", __name__, url_prefix="/api/inventory")


@inventory_bp.post("/adjust")
@require_auth
@require_permission(Module.STOCK, Action.EDIT)
def adjust_stock_route():
    """
    Manual stock adjustment.

    Body: {productId, type: "add" | "reduce", quantity, note}
    Returns {"message", "newStock"}.
    """
    payload = json_object()
    result = inventory_service.adjust_stock(
        product_id=payload.get("productId"),
        direction=payload.get("type"),
        quantity=payload.get("quantity"),
        note=payload.get("note"),
    )
    return jsonify({"message": "Stock adjusted", **result})


@inventory_bp.get("/history")
@require_auth
@require_permission(Module.STOCK, Action.SHOW)
def inventory_history_route():
    result = inventory_service.list_history(
        product_id=request.args.get("productId", type=int),
        history_type=request.args.get("type"),
        page=request.args.get("page", type=int),
        limit=request.args.get("limit", type=int),
    )
    return jsonify(result)
