# Overview: Request and permission decorators for API routes.

from functools import wraps

from flask import g, jsonify, request

from .errors import Forbidden
from .services import permission_service, session_service


def _is_authenticated() -> bool:
    return hasattr(g, 'current_user')


def _unauthorized():
    return jsonify({"message": "Unauthorized"}), 401


def _forbidden():
    return jsonify({"message": "Forbidden"}), 403


def require_auth(f):
    """
    Require a valid bearer token.

    Sets g.current_user to the SessionContext built from the token claims.
    Missing, malformed, tampered and expired tokens all get the same 401.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        g.pop('current_user', None)

        auth_header = request.headers.get("Authorization")
        if not auth_header or not auth_header.startswith("Bearer "):
            return _unauthorized()

        token = auth_header.split(" ", 1)[1].strip()
        context = session_service.validate_session(token)
        if not context:
            return _unauthorized()

        g.current_user = context
        return f(*args, **kwargs)

    return decorated_function


def require_permission(module: str, action: str):
    """
    Require permission for (module, action). Use below @require_auth.

    superadmin always passes; other roles need an allowed matrix row.
    """
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            # Ensure @require_auth was called first
            if not _is_authenticated():
                return _unauthorized()

            try:
                permission_service.require_permission(
                    g.current_user, module, action, resource=request.path
                )
            except Forbidden:
                return _forbidden()

            return f(*args, **kwargs)

        return decorated_function
    return decorator


def require_superadmin(f):
    """Only the superadmin role passes, whatever the matrix says."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if not _is_authenticated():
            return _unauthorized()

        try:
            permission_service.require_superadmin(g.current_user, resource=request.path)
        except Forbidden:
            return _forbidden()

        return f(*args, **kwargs)

    return decorated_function
