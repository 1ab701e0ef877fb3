"""
余额流水模型模块

每次订单到账都会写一条流水，与余额递增在同一事务里提交。
order_no 唯一，同一订单不可能出现两条到账流水。
"""
from datetime import datetime

from sqlalchemy import BigInteger, Column, DateTime, ForeignKey, String
from sqlmodel import Field, SQLModel

from coinstore.core.snowflake import generate_id
from coinstore.enums import CoinTransactionType

from .base import utc_now


class CoinTransaction(SQLModel, table=True):
    """
    余额流水

    字段说明：
    - user_id: 用户 ID
    - type: 流水类型（目前只有 purchase）
    - amount: 变动数量（正数为增加）
    - order_no: 关联订单号（唯一）
    - created_at: 记账时间
    """
    __tablename__ = "coin_transactions"
    id: int = Field(
        default_factory=generate_id,
        sa_column=Column(BigInteger, primary_key=True, autoincrement=False),
    )
    user_id: int = Field(
        sa_column=Column(
            BigInteger, ForeignKey("users.id", ondelete="CASCADE"), index=True, nullable=False
        )
    )
    type: CoinTransactionType = Field(sa_column=Column(String(16), nullable=False))
    amount: int = Field(nullable=False)
    order_no: str = Field(
        sa_column=Column(String(32), unique=True, nullable=False)
    )
    created_at: datetime = Field(
        default_factory=utc_now,
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )
