"""
商品模型模块

商品即积分包（NamoCoins Pack），价格为整数卢比。
"""
from datetime import datetime

from sqlalchemy import BigInteger, Column, DateTime, String
from sqlmodel import Field, SQLModel

from coinstore.core.snowflake import generate_id

from .base import utc_now


class Product(SQLModel, table=True):
    """
    商品模型

    字段说明：
    - sku: 商品编码（唯一，种子数据按它 upsert）
    - price_inr: 价格（整数卢比）
    - coins: 购买可得积分，可由管理员手工修改或按兑换比例重算
    - active: 是否上架
    - best_seller: 是否为推荐商品
    """
    __tablename__ = "products"
    id: int = Field(
        default_factory=generate_id,
        sa_column=Column(BigInteger, primary_key=True, autoincrement=False),
    )
    sku: str = Field(
        sa_column=Column(String(64), unique=True, index=True, nullable=False)
    )
    name: str = Field(max_length=128)
    price_inr: int = Field(nullable=False)
    coins: int = Field(default=0, nullable=False)
    active: bool = Field(default=True)
    best_seller: bool = Field(default=False)

    created_at: datetime = Field(
        default_factory=utc_now,
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )
    updated_at: datetime = Field(
        default_factory=utc_now,
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )
