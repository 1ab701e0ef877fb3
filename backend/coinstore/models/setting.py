"""全局配置项模型（键值对，目前只有兑换比例 conversionRate）"""
from sqlalchemy import BigInteger, Column, String
from sqlmodel import Field, SQLModel

from coinstore.core.snowflake import generate_id


class Setting(SQLModel, table=True):
    __tablename__ = "settings"
    id: int = Field(
        default_factory=generate_id,
        sa_column=Column(BigInteger, primary_key=True, autoincrement=False),
    )
    key: str = Field(
        sa_column=Column(String(64), unique=True, index=True, nullable=False)
    )
    int_value: int | None = Field(default=None)
