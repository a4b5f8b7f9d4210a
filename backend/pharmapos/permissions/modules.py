# Overview: Permission modules and actions recognised by the role matrix.

from enum import Enum


class Module:
    """Module names as stored in role_permissions.module."""
    PRODUCTS = "Products"
    STOCK = "Stock"
    OUTLETS = "Outlets"
    TRANSACTIONS = "Transactions"
    USERS = "Users"
    SALES_REPORT = "Sales Report"
    FORECASTING = "Forecasting"
    SUBSTITUTIONS = "Substitutions"
    SUPPLIERS = "Suppliers"
    STOCK_OPNAME = "Stock Opname"
    SETTINGS = "Settings"


# Display order used by the role permission editor
MODULES = (
    Module.PRODUCTS,
    Module.STOCK,
    Module.OUTLETS,
    Module.TRANSACTIONS,
    Module.USERS,
    Module.SALES_REPORT,
    Module.FORECASTING,
    Module.SUBSTITUTIONS,
    Module.SUPPLIERS,
    Module.STOCK_OPNAME,
    Module.SETTINGS,
)


class Action(str, Enum):
    CREATE = "create"
    EDIT = "edit"
    DELETE = "delete"
    SHOW = "show"


ACTIONS = tuple(action.value for action in Action)

# Reserved role name: bypasses every permission check
SUPERADMIN_ROLE = "superadmin"
