# Overview: Flask API routes for stock opname operations; parses input and returns JSON responses.

from flask import Blueprint, jsonify

from ..decorators import require_auth, require_permission
from ..permissions import Action, Module
from ..services import opname_service
from ..validation import json_object


stock_opname_bp = Blueprint("stock_opname", __name__, url_prefix="/api/stock-opname")


@stock_opname_bp.post("")
@require_auth
@require_permission(Module.STOCK_OPNAME, Action.CREATE)
def submit_opname_route():
    """Body: {items: [{id, system_stock, actual_stock}], note}."""
    payload = json_object()
    result = opname_service.submit_opname(items=payload.get("items"), note=payload.get("note"))
    return jsonify({"message": "Stock opname saved", **result})
