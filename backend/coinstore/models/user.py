"""
用户模型模块

定义用户相关的数据库模型。
"""
from datetime import datetime

from sqlalchemy import BigInteger, Column, DateTime, Integer, String, text
from sqlmodel import Field, SQLModel

from coinstore.core.snowflake import generate_id

from .base import utc_now


class User(SQLModel, table=True):
    """
    用户模型

    字段说明：
    - id: 主键，Snowflake ID
    - email: 邮箱（唯一，用于登录和接收发票）
    - name: 姓名（也可用于登录）
    - minecraft_username: 游戏内用户名（RCON 发放 PlayerPoints 的目标）
    - phone: 手机号
    - password_hash: bcrypt 密码哈希
    - coin_balance: 网站余额，只在订单首次变为 PAID 时原子递增
    - reset_otp / reset_otp_expires / reset_otp_sent_at: 找回密码验证码（本服务不使用）
    - created_at: 注册时间
    """
    __tablename__ = "users"
    id: int = Field(
        default_factory=generate_id,
        sa_column=Column(BigInteger, primary_key=True, autoincrement=False),
    )
    email: str = Field(
        sa_column=Column(String(255), unique=True, index=True, nullable=False),
    )
    name: str = Field(max_length=128)
    minecraft_username: str = Field(default="", max_length=64)
    phone: str = Field(default="", max_length=32)
    password_hash: str = Field(max_length=255)

    coin_balance: int = Field(
        default=0,
        sa_column=Column(Integer, nullable=False, server_default=text("0")),
    )

    reset_otp: str | None = Field(default=None, max_length=6)
    reset_otp_expires: datetime | None = Field(
        default=None, sa_column=Column(DateTime(timezone=True), nullable=True)
    )
    reset_otp_sent_at: datetime | None = Field(
        default=None, sa_column=Column(DateTime(timezone=True), nullable=True)
    )

    created_at: datetime = Field(
        default_factory=utc_now,
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )
