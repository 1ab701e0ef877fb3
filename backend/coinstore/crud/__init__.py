"""CRUD 操作模块"""
from .order import OrderDetail
from .order import attach_payment as attach_order_payment
from .order import create as create_order
from .order import get_detail as get_order_detail
from .order import get_for_user as get_user_order
from .order import list_details as list_order_details
from .order import list_for_user as list_user_orders
from .order import make_order_no
from .order import mark_paid_once as mark_order_paid_once
from .order import set_status as set_order_status
from .product import get as get_product
from .product import list_active_for_update as list_active_products_for_update
from .product import list_products
from .setting import get_coin_rate, set_coin_rate
from .user import create as create_user
from .user import credit_coins
from .user import get as get_user
from .user import get_by_email as get_user_by_email
from .user import get_by_login as get_user_by_login

__all__ = [
    "OrderDetail",
    "attach_order_payment",
    "create_order",
    "get_order_detail",
    "get_user_order",
    "list_order_details",
    "list_user_orders",
    "make_order_no",
    "mark_order_paid_once",
    "set_order_status",
    "get_product",
    "list_active_products_for_update",
    "list_products",
    "get_coin_rate",
    "set_coin_rate",
    "create_user",
    "credit_coins",
    "get_user",
    "get_user_by_email",
    "get_user_by_login",
]
