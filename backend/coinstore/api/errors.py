"""
自定义异常模块

定义应用特定的异常类，用于统一的错误处理。
所有业务异常都继承自 AppError，在 main.py 中有统一的异常处理器。

错误码约定：前三位是 HTTP 状态码，后三位是业务序号。
"""
from __future__ import annotations


class AppError(Exception):
    """
    应用自定义异常类

    - code: 业务错误码（用于前端区分不同错误）
    - message: 错误消息
    - status_code: HTTP 状态码（400, 404, 500 等）

    使用示例：
        raise AppError(code=404101, message="Order not found", status_code=404)
    """

    def __init__(self, *, code: int, message: str, status_code: int = 400) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.status_code = status_code


def invalid_status() -> AppError:
    return AppError(code=400101, message="Invalid order status", status_code=400)


def rate_out_of_range() -> AppError:
    return AppError(code=400201, message="Rate must be in (0, 1000]", status_code=400)


def invalid_product_fields() -> AppError:
    return AppError(code=400202, message="Invalid product fields", status_code=400)


def bad_credentials() -> AppError:
    return AppError(code=401001, message="Wrong credentials", status_code=401)


def admin_required() -> AppError:
    """
    创建"需要管理员权限"异常

    所有管理操作都显式接收调用者身份，不是管理员时抛出。
    """
    return AppError(code=403001, message="Admin privileges required", status_code=403)


def user_not_found() -> AppError:
    return AppError(code=404001, message="User not found", status_code=404)


def order_not_found() -> AppError:
    # 订单不属于调用者时也返回 404，不暴露订单是否存在
    return AppError(code=404101, message="Order not found", status_code=404)


def product_not_found() -> AppError:
    return AppError(code=404201, message="Product not found", status_code=404)
