# Overview: Utility functions for permission lookups and validation.

from ..errors import ValidationError
from .modules import MODULES, Action


def validate_module(name) -> str:
    """Return the module name or raise ValidationError for an unknown module."""
    if name not in MODULES:
        raise ValidationError(f"Unknown module: {name}")
    return name


def parse_action(value) -> Action:
    """Map an action string onto the closed Action enum."""
    try:
        return Action(value)
    except ValueError:
        raise ValidationError(f"Unknown action: {value}")


def empty_matrix_row(module: str, allowed: bool = False) -> dict:
    return {"module": module, **{action.value: allowed for action in Action}}
