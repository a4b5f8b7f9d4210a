# Overview: Permission system package.
# Re-exports all public APIs for backwards-compatible imports.

from .modules import Module, MODULES, Action, ACTIONS, SUPERADMIN_ROLE
from .roles import DEFAULT_ROLES, DEFAULT_ROLE_PERMISSIONS
from .helpers import validate_module, parse_action, empty_matrix_row

__all__ = [
    "Module",
    "MODULES",
    "Action",
    "ACTIONS",
    "SUPERADMIN_ROLE",
    "DEFAULT_ROLES",
    "DEFAULT_ROLE_PERMISSIONS",
    "validate_module",
    "parse_action",
    "empty_matrix_row",
]
