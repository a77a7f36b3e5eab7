from jwt_pizza.models.user import User
from jwt_pizza.models.user_role import UserRole
from jwt_pizza.models.auth_session import AuthSession
from jwt_pizza.models.menu_item import MenuItem
from jwt_pizza.models.franchise import Franchise
from jwt_pizza.models.store import Store
from jwt_pizza.models.order import DinerOrder
from jwt_pizza.models.order_item import OrderItem

__all__ = [
    "AuthSession",
    "DinerOrder",
    "Franchise",
    "MenuItem",
    "OrderItem",
    "Store",
    "User",
    "UserRole",
]
