# Overview: Flask API routes for rbac operations; parses input and returns JSON responses.

# backend/pharmapos/routes/rbac.py
"""
Role and permission matrix routes.

- GET /api/rbac/modules: module and action names (any authenticated user)
- GET /api/rbac/roles: all roles (any authenticated user)
- POST /api/rbac/roles, DELETE /api/rbac/roles/<id>: superadmin only
- GET /api/rbac/permissions?roleId|roleName: own role freely, others need Settings.show
- PUT /api/rbac/permissions: Settings.edit; single cell or bulk matrix
"""
from flask import Blueprint, g, jsonify, request

from ..decorators import require_auth, require_permission, require_superadmin
from ..permissions import ACTIONS, MODULES, Action, Module
from ..services import permission_service
from ..validation import json_object, parse_positive_int


rbac_bp = Blueprint("rbac", __name__, url_prefix="/api/rbac")


def _role_id_arg(value, field: str = "roleId") -> int:
    return parse_positive_int(value, field)


@rbac_bp.get("/modules")
@require_auth
def list_modules_route():
    return jsonify({"modules": list(MODULES), "actions": list(ACTIONS)})


@rbac_bp.get("/roles")
@require_auth
def list_roles_route():
    return jsonify([role.to_dict() for role in permission_service.list_roles()])


@rbac_bp.post("/roles")
@require_auth
@require_superadmin
def create_role_route():
    payload = json_object()
    role = permission_service.create_role(payload.get("name"))
    return jsonify(role.to_dict()), 201


@rbac_bp.delete("/roles/<int:role_id>")
@require_auth
@require_superadmin
def delete_role_route(role_id: int):
    permission_service.delete_role(role_id)
    return jsonify({"message": "Role deleted"})


@rbac_bp.get("/permissions")
@require_auth
def get_permissions_route():
    context = g.current_user
    role_id = request.args.get("roleId")
    role_name = request.args.get("roleName")

    if role_id is not None:
        role = permission_service.get_role(_role_id_arg(role_id))
        role_name = role.name
    elif not role_name:
        role_name = context.role

    if role_name != context.role:
        permission_service.require_permission(context, Module.SETTINGS, Action.SHOW, resource=request.path)

    return jsonify(permission_service.get_permissions_for_role_name(role_name))


@rbac_bp.put("/permissions")
@require_auth
@require_permission(Module.SETTINGS, Action.EDIT)
def update_permissions_route():
    """
    Single: {roleId, module, action, allowed}
    Bulk: {roleId, permissions: [{module, create, edit, delete, show}, ...]}
    """
    payload = json_object()
    role_id = _role_id_arg(payload.get("roleId"))

    if "permissions" in payload:
        matrix = permission_service.bulk_update_permissions(role_id, payload["permissions"])
        return jsonify({"message": "Permissions updated", "permissions": matrix})

    row = permission_service.set_permission(
        role_id,
        payload.get("module"),
        payload.get("action"),
        payload.get("allowed"),
    )
    return jsonify({"message": "Permission updated", "permission": row.to_dict()})
