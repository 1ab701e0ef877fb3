"""
基础模型模块

定义所有模型共用的时间工具。库内统一存 UTC，展示给用户时转印度时间。
"""
from datetime import datetime, timedelta, timezone

from sqlmodel import SQLModel

# Asia/Kolkata 无夏令时，固定 +05:30
IST = timezone(timedelta(hours=5, minutes=30), name="IST")


def utc_now() -> datetime:
    """获取当前 UTC 时间"""
    return datetime.now(timezone.utc)


def to_ist(value: datetime) -> datetime:
    """
    转换为印度标准时间

    SQLite 读回的时间不带时区，按 UTC 处理。
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(IST)


__all__ = ["SQLModel", "IST", "utc_now", "to_ist"]
