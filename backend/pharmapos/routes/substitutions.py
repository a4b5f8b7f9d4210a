# Overview: Flask API routes for substitutions operations; parses input and returns JSON responses.

from flask import Blueprint, jsonify

from ..decorators import require_auth, require_permission
from ..permissions import Action, Module
from ..services import substitution_service
from ..validation import json_object


substitutions_bp = Blueprint("substitutions", __name__, url_prefix="/api/substitutions")


@substitutions_bp.post("")
@require_auth
@require_permission(Module.SUBSTITUTIONS, Action.SHOW)
def lookup_substitutes_route():
    payload = json_object()
    return jsonify(substitution_service.lookup_substitutes(payload.get("message")))
