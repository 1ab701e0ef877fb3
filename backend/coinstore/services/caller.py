"""
调用者身份

每个业务操作都显式接收调用者身份，不从请求上下文里隐式读取。
"""
from __future__ import annotations

from dataclasses import dataclass

from coinstore.api.errors import admin_required


@dataclass(frozen=True)
class Caller:
    user_id: int | None = None
    is_admin: bool = False

    @classmethod
    def admin(cls) -> Caller:
        return cls(is_admin=True)

    @classmethod
    def customer(cls, user_id: int) -> Caller:
        return cls(user_id=user_id)


def require_admin(caller: Caller) -> None:
    """
    Raises:
        AppError: 调用者不是管理员时抛出 403001
    """
    if not caller.is_admin:
        raise admin_required()
