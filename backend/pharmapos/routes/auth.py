# Overview: Flask API routes for auth operations; parses input and returns JSON responses.

from flask import Blueprint, g, jsonify

from ..decorators import require_auth
from ..errors import InvalidCredentials
from ..services import auth_service, permission_service
from ..validation import json_object


auth_bp = Blueprint("auth", __name__, url_prefix="/api")


@auth_bp.post("/login")
def login_route():
    """
    Authenticate and issue an access token.

    Unknown username, wrong password and inactive account all answer
    401 {"message": "Invalid credentials"}.
    """
    data = json_object()
    username = data.get("username")
    password = data.get("password")

    if not username or not password:
        return jsonify({"message": "Username and password are required"}), 400

    try:
        token, user = auth_service.login(username, password)
    except InvalidCredentials as e:
        return jsonify({"message": e.message}), 401

    return jsonify({
        "token": token,
        "user": user.to_dict(),
    }), 200


@auth_bp.get("/me")
@require_auth
def me_route():
    """Current token claims plus the caller's permission matrix."""
    context = g.current_user
    return jsonify({
        "user": context.to_dict(),
        "permissions": permission_service.get_permissions_for_role_name(context.role),
    }), 200
