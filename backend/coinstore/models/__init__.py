"""
数据库模型定义模块

本模块使用 SQLModel 定义所有数据库表结构。

模型按功能拆分：
- user.py: 用户模型（含网站余额）
- product.py: 商品（积分包）模型
- order.py: 订单模型
- setting.py: 全局配置项（兑换比例）
- ledger.py: 余额流水模型
"""
from sqlmodel import SQLModel

from .base import to_ist, utc_now
from .ledger import CoinTransaction
from .order import Order
from .product import Product
from .setting import Setting
from .user import User

__all__ = [
    "SQLModel",
    "utc_now",
    "to_ist",
    "User",
    "Product",
    "Order",
    "Setting",
    "CoinTransaction",
]
