# Overview: Flask API routes for settings operations; parses input and returns JSON responses.

from flask import Blueprint, jsonify

from ..decorators import require_auth, require_permission
from ..permissions import Action, Module
from ..services import settings_service
from ..validation import json_object


settings_bp = Blueprint("settings", __name__, url_prefix="/api/settings")


@settings_bp.get("")
@require_auth
def get_settings_route():
    # Cashiers need the rates to price a cart, so reading only requires a login
    return jsonify(settings_service.get_settings())


@settings_bp.put("")
@require_auth
@require_permission(Module.SETTINGS, Action.EDIT)
def update_settings_route():
    payload = json_object()
    return jsonify(settings_service.update_settings(payload))
