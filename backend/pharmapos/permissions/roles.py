# Overview: Default role permission matrix seeded at bootstrap.

from .modules import MODULES, ACTIONS, Module, Action


DEFAULT_ROLES = ("Admin", "Cashier")

DEFAULT_ROLE_PERMISSIONS = {
    # Full access to every module; role administration stays with superadmin
    "Admin": {module: set(ACTIONS) for module in MODULES},
    # Point of sale only
    "Cashier": {
        Module.PRODUCTS: {Action.SHOW.value},
        Module.TRANSACTIONS: {Action.CREATE.value, Action.SHOW.value},
        Module.SUBSTITUTIONS: {Action.SHOW.value},
    },
}
