"""
订单路由模块

用户查看和操作自己的订单：
- 订单列表（分页）与详情
- 支付页信息（UPI 收款账号）
- 提交 UPI 交易号 / 付款截图地址
"""
from __future__ import annotations

from fastapi import APIRouter, Query

from coinstore.api.deps import CustomerDep, SessionDep
from coinstore.api.schemas import (
    ApiEnvelope,
    OrderData,
    OrdersData,
    PaymentInfoData,
    PaymentProofRequest,
)
from coinstore.core.config import settings
from coinstore.models import Order, Product
from coinstore.services import checkout_service

router = APIRouter(prefix="/order", tags=["order"])


def to_order_data(order: Order, product: Product | None = None) -> OrderData:
    return OrderData(
        id=order.id,
        order_no=order.order_no,
        product_id=order.product_id,
        product_name=product.name if product else None,
        price_inr=order.price_inr,
        coins=order.coins,
        status=order.status,
        payment_method=order.payment_method,
        upi_txn_id=order.upi_txn_id,
        payment_proof_url=order.payment_proof_url,
        created_at=order.created_at,
        paid_at=order.paid_at,
    )


@router.get("/list", response_model=ApiEnvelope)
def list_orders(
    session: SessionDep,
    caller: CustomerDep,
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=20, ge=1, le=100),
) -> ApiEnvelope:
    """
    获取本人订单列表（分页，最新的在前）

    请求路径: GET /api/v1/order/list?page=1&page_size=20
    """
    rows, count = checkout_service.list_orders(session, caller, page=page, page_size=page_size)
    data = [to_order_data(o, p) for o, p in rows]
    return ApiEnvelope(data=OrdersData(data=data, count=count))


@router.get("/{order_id}", response_model=ApiEnvelope)
def get_order(session: SessionDep, caller: CustomerDep, order_id: int) -> ApiEnvelope:
    """
    获取订单详情，只能查询本人订单

    Raises:
        AppError: 订单不存在或不属于当前用户时返回 404101
    """
    order = checkout_service.get_order(session, caller, order_id)
    return ApiEnvelope(data=to_order_data(order))


@router.get("/{order_id}/pay-upi", response_model=ApiEnvelope)
def pay_upi(session: SessionDep, caller: CustomerDep, order_id: int) -> ApiEnvelope:
    """
    支付页信息

    请求路径: GET /api/v1/order/{order_id}/pay-upi
    """
    info = checkout_service.get_payment_info(session, caller, order_id, settings=settings)
    data = PaymentInfoData(
        order=to_order_data(info.order, info.product),
        upi_id=info.upi_id,
        payee_name=info.payee_name,
    )
    return ApiEnvelope(data=data)


@router.post("/{order_id}/proof", response_model=ApiEnvelope)
def upload_proof(
    session: SessionDep, caller: CustomerDep, order_id: int, body: PaymentProofRequest
) -> ApiEnvelope:
    """
    提交付款信息

    请求路径: POST /api/v1/order/{order_id}/proof
    """
    order = checkout_service.attach_payment_proof(
        session,
        caller,
        order_id,
        upi_txn_id=body.upi_txn_id,
        proof_url=body.payment_proof_url,
    )
    return ApiEnvelope(data=to_order_data(order))
