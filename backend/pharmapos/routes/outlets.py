# Overview: Flask API routes for outlets operations; parses input and returns JSON responses.

from flask import Blueprint, jsonify

from ..decorators import require_auth, require_permission
from ..permissions import Action, Module
from ..services import outlet_service
from ..validation import json_object


outlets_bp = Blueprint("outlets", __name__, url_prefix="/api/outlets")


@outlets_bp.get("")
@require_auth
@require_permission(Module.OUTLETS, Action.SHOW)
def list_outlets_route():
    return jsonify([outlet.to_dict() for outlet in outlet_service.list_outlets()])


@outlets_bp.post("")
@require_auth
@require_permission(Module.OUTLETS, Action.CREATE)
def create_outlet_route():
    payload = json_object()
    patch = outlet_service.validate_outlet_payload(payload, partial=False)
    outlet = outlet_service.create_outlet(patch=patch)
    return jsonify(outlet.to_dict()), 201


@outlets_bp.put("/<int:outlet_id>")
@require_auth
@require_permission(Module.OUTLETS, Action.EDIT)
def update_outlet_route(outlet_id: int):
    payload = json_object()
    patch = outlet_service.validate_outlet_payload(payload, partial=True)
    outlet = outlet_service.update_outlet(outlet_id=outlet_id, patch=patch)
    return jsonify(outlet.to_dict())


@outlets_bp.delete("/<int:outlet_id>")
@require_auth
@require_permission(Module.OUTLETS, Action.DELETE)
def delete_outlet_route(outlet_id: int):
    outlet_service.delete_outlet(outlet_id=outlet_id)
    return jsonify({"message": "Outlet deleted"})
