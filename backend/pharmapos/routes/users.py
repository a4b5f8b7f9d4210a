# Overview: Flask API routes for users operations; parses input and returns JSON responses.

# backend/pharmapos/routes/users.py
"""
Staff account routes.

Superadmin accounts can only be created, edited or deleted by a superadmin,
and nobody can delete their own account (enforced in user_service).
"""
from flask import Blueprint, g, jsonify, request

from ..decorators import require_auth, require_permission
from ..permissions import Action, Module
from ..services import user_service
from ..validation import json_object


users_bp = Blueprint("users", __name__, url_prefix="/api/users")


@users_bp.get("")
@require_auth
@require_permission(Module.USERS, Action.SHOW)
def list_users_route():
    result = user_service.list_users(
        page=request.args.get("page", type=int),
        limit=request.args.get("limit", type=int),
        search=request.args.get("search"),
    )
    return jsonify(result)


@users_bp.get("/<int:user_id>")
@require_auth
@require_permission(Module.USERS, Action.SHOW)
def get_user_route(user_id: int):
    return jsonify(user_service.get_user(user_id).to_dict())


@users_bp.post("")
@require_auth
@require_permission(Module.USERS, Action.CREATE)
def create_user_route():
    payload = json_object()
    user = user_service.create_user(g.current_user, payload)
    return jsonify(user.to_dict()), 201


@users_bp.put("/<int:user_id>")
@require_auth
@require_permission(Module.USERS, Action.EDIT)
def update_user_route(user_id: int):
    payload = json_object()
    user = user_service.update_user(g.current_user, user_id, payload)
    return jsonify(user.to_dict())


@users_bp.delete("/<int:user_id>")
@require_auth
@require_permission(Module.USERS, Action.DELETE)
def delete_user_route(user_id: int):
    user_service.delete_user(g.current_user, user_id)
    return jsonify({"message": "User deleted"})
