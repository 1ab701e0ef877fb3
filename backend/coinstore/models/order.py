"""
订单模型模块

定义订单相关的数据库模型。
"""
from datetime import datetime

from sqlalchemy import BigInteger, Column, DateTime, ForeignKey, Index, String
from sqlmodel import Field, SQLModel

from coinstore.core.snowflake import generate_id
from coinstore.enums import OrderStatus, PaymentMethod

from .base import utc_now


class Order(SQLModel, table=True):
    """
    订单模型

    一次购买尝试。price_inr 和 coins 在下单时从商品快照，
    之后商品改价或重算积分都不会影响已有订单。

    字段说明：
    - order_no: 订单号（唯一，格式 NC-YYYYMMDD-XXXXXX）
    - user_id / product_id: 所属用户与商品
    - price_inr: 下单时价格（整数卢比）
    - coins: 下单时积分数
    - status: 订单状态
    - payment_method: 支付方式（默认 UPI_GPAY）
    - upi_txn_id: 用户填写的 UPI 交易号
    - payment_proof_url: 付款截图的存储地址
    - paid_at: 首次变为 PAID 的时间
    """
    __tablename__ = "orders"
    __table_args__ = (Index("ix_orders_user_created", "user_id", "created_at"),)

    id: int = Field(
        default_factory=generate_id,
        sa_column=Column(BigInteger, primary_key=True, autoincrement=False),
    )
    order_no: str = Field(
        sa_column=Column(String(32), unique=True, index=True, nullable=False)
    )
    user_id: int = Field(
        sa_column=Column(
            BigInteger, ForeignKey("users.id", ondelete="CASCADE"), index=True, nullable=False
        )
    )
    product_id: int = Field(
        sa_column=Column(BigInteger, ForeignKey("products.id"), nullable=False)
    )

    price_inr: int = Field(nullable=False)
    coins: int = Field(nullable=False)

    status: OrderStatus = Field(sa_column=Column(String(32), nullable=False))
    payment_method: str | None = Field(default=PaymentMethod.UPI_GPAY.value, max_length=32)
    upi_txn_id: str | None = Field(default=None, max_length=128)
    payment_proof_url: str | None = Field(default=None, max_length=512)

    created_at: datetime = Field(
        default_factory=utc_now,
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )
    paid_at: datetime | None = Field(
        default=None, sa_column=Column(DateTime(timezone=True), nullable=True)
    )
    updated_at: datetime = Field(
        default_factory=utc_now,
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )
