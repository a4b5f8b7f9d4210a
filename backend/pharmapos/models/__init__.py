from .outlets import Outlet
from .auth import User, Role, RolePermission
from .inventory import Product, Supplier, InventoryHistory
from .sales import Transaction, TransactionItem
from .settings import Setting

__all__ = [
    'Outlet',
    'User', 'Role', 'RolePermission',
    'Product', 'Supplier', 'InventoryHistory',
    'Transaction', 'TransactionItem',
    'Setting',
]
