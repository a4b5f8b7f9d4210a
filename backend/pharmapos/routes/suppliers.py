# Overview: Flask API routes for suppliers operations; parses input and returns JSON responses.

from flask import Blueprint, jsonify, request

from ..decorators import require_auth, require_permission
from ..permissions import Action, Module
from ..services import supplier_service
from ..validation import json_object


suppliers_bp = Blueprint("suppliers", __name__, url_prefix="/api/suppliers")


@suppliers_bp.get("")
@require_auth
@require_permission(Module.SUPPLIERS, Action.SHOW)
def list_suppliers_route():
    result = supplier_service.list_suppliers(
        page=request.args.get("page", type=int),
        limit=request.args.get("limit", type=int),
        search=request.args.get("search"),
    )
    return jsonify(result)


@suppliers_bp.get("/<int:supplier_id>")
@require_auth
@require_permission(Module.SUPPLIERS, Action.SHOW)
def get_supplier_route(supplier_id: int):
    return jsonify(supplier_service.get_supplier(supplier_id).to_dict())


@suppliers_bp.post("")
@require_auth
@require_permission(Module.SUPPLIERS, Action.CREATE)
def create_supplier_route():
    payload = json_object()
    patch = supplier_service.validate_supplier_payload(payload, partial=False)
    supplier = supplier_service.create_supplier(patch=patch)
    return jsonify(supplier.to_dict()), 201


@suppliers_bp.put("/<int:supplier_id>")
@require_auth
@require_permission(Module.SUPPLIERS, Action.EDIT)
def update_supplier_route(supplier_id: int):
    payload = json_object()
    patch = supplier_service.validate_supplier_payload(payload, partial=True)
    supplier = supplier_service.update_supplier(supplier_id=supplier_id, patch=patch)
    return jsonify(supplier.to_dict())


@suppliers_bp.delete("/<int:supplier_id>")
@require_auth
@require_permission(Module.SUPPLIERS, Action.DELETE)
def delete_supplier_route(supplier_id: int):
    supplier_service.delete_supplier(supplier_id=supplier_id)
    return jsonify({"message": "Supplier deleted"})
