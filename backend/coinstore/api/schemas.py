"""
API 请求/响应数据模型（Schema）

定义所有 API 接口的请求和响应数据结构。
使用 Pydantic 进行数据验证和序列化，这些模型不是数据库表，只用于 API 数据交换。
"""
from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from coinstore.enums import FulfillmentReason, OrderStatus

# ============================================================
# 通用响应模型
# ============================================================


class TokenPayload(BaseModel):
    """
    JWT Token 载荷模型

    sub 为用户 ID（管理员令牌为 "admin"），scope 区分用户与管理员。
    """
    sub: str | None = None
    scope: str | None = None


class ApiEnvelope(BaseModel):
    """
    API 统一响应格式

    - code: 状态码（0 表示成功，非 0 表示错误）
    - message: 消息（成功时为 "success"，错误时为错误描述）
    - data: 业务数据（错误时为 None）

    示例响应：
        {"code": 0, "message": "success", "data": {...}}
        {"code": 404101, "message": "Order not found", "data": None}
    """
    code: int = 0
    message: str = "success"
    data: Any | None = None


# ============================================================
# 认证
# ============================================================


class LoginRequest(BaseModel):
    """用户登录：邮箱或姓名 + 密码"""
    identifier: str = Field(min_length=1, max_length=255)
    password: str = Field(min_length=1, max_length=128)


class AdminLoginRequest(BaseModel):
    email: str = Field(min_length=1, max_length=255)
    password: str = Field(min_length=1, max_length=128)


class UserProfile(BaseModel):
    """用户资料（含网站余额）"""
    id: int
    email: str
    name: str
    minecraft_username: str
    phone: str
    coin_balance: int


class AuthLoginData(BaseModel):
    access_token: str  # JWT 访问令牌
    expires_in: int  # token 过期时间（秒）
    user: UserProfile | None = None  # 管理员登录时为空


# ============================================================
# 商品与订单
# ============================================================


class ProductPublic(BaseModel):
    id: int
    sku: str
    name: str
    price_inr: int
    coins: int
    active: bool
    best_seller: bool


class ShopData(BaseModel):
    products: list[ProductPublic]
    coin_rate: int


class OrderData(BaseModel):
    """
    订单响应模型

    price_inr、coins 为下单时的快照。
    """
    id: int
    order_no: str
    product_id: int
    product_name: str | None = None
    price_inr: int
    coins: int
    status: OrderStatus
    payment_method: str | None = None
    upi_txn_id: str | None = None
    payment_proof_url: str | None = None
    created_at: datetime
    paid_at: datetime | None = None


class OrdersData(BaseModel):
    data: list[OrderData]
    count: int


class PaymentInfoData(BaseModel):
    """支付页：订单 + UPI 收款信息"""
    order: OrderData
    upi_id: str
    payee_name: str


class PaymentProofRequest(BaseModel):
    """
    提交付款信息

    截图上传由外部存储完成，这里只接收上传后的地址。
    """
    upi_txn_id: str | None = Field(default=None, max_length=128)
    payment_proof_url: str | None = Field(default=None, max_length=512)


# ============================================================
# 管理后台
# ============================================================


class AdminOrderData(OrderData):
    user_id: int
    user_name: str
    user_email: str
    minecraft_username: str


class DashboardData(BaseModel):
    orders: list[AdminOrderData]
    products: list[ProductPublic]
    coin_rate: int


class OrderStatusRequest(BaseModel):
    """状态值为字符串，路由层校验是否为四个合法值之一"""
    status: str = Field(max_length=64)


class FulfillmentData(BaseModel):
    ok: bool
    reason: FulfillmentReason | None = None
    detail: str | None = None
    command: str | None = None
    response: str | None = None


class NotificationData(BaseModel):
    ok: bool
    detail: str | None = None


class TransitionData(BaseModel):
    """
    状态修改结果

    fulfillment / notification 只有在首次进入 PAID 时才有值。
    """
    order_id: int
    previous_status: OrderStatus | None = None
    status: OrderStatus | None = None
    balance_credited: bool
    fulfillment: FulfillmentData | None = None
    notification: NotificationData | None = None


class RateUpdateRequest(BaseModel):
    coin_rate: float
    recalc: bool = False


class RateUpdateData(BaseModel):
    coin_rate: int
    repriced: int


class ProductUpdateRequest(BaseModel):
    """数值允许小数，服务层四舍五入后校验"""
    name: str = Field(max_length=128)
    price_inr: float
    coins: float
    active: bool = False
    best_seller: bool = False
