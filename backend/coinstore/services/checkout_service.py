"""
用户下单流程

浏览商品 -> 下单（快照价格与积分）-> 查看 UPI 收款信息 -> 提交交易号/付款截图。
订单只能由下单用户本人操作，其他人一律视为订单不存在。
"""
from __future__ import annotations

from dataclasses import dataclass

from sqlmodel import Session

from coinstore import crud
from coinstore.api.errors import order_not_found, product_not_found
from coinstore.core.config import Settings
from coinstore.models import Order, Product
from coinstore.services.caller import Caller
from coinstore.services.pricing import DEFAULT_PRICING, PricingConfig


@dataclass(frozen=True)
class ShopView:
    products: list[Product]
    coin_rate: int


@dataclass(frozen=True)
class PaymentInfo:
    order: Order
    product: Product
    upi_id: str
    payee_name: str


def _owner_id(caller: Caller) -> int:
    if caller.user_id is None:
        raise order_not_found()
    return caller.user_id


def list_shop(
    session: Session, caller: Caller, *, pricing: PricingConfig = DEFAULT_PRICING
) -> ShopView:
    """上架商品（按价格升序）与当前兑换比例"""
    _owner_id(caller)
    return ShopView(
        products=crud.list_products(session=session, active_only=True),
        coin_rate=crud.get_coin_rate(session=session, default=pricing.default_rate),
    )


def create_order(session: Session, caller: Caller, product_id: int) -> Order:
    """
    下单

    Raises:
        AppError: 商品不存在或已下架（404201）
    """
    user_id = _owner_id(caller)
    product = crud.get_product(session=session, product_id=product_id)
    if product is None or not product.active:
        raise product_not_found()
    return crud.create_order(session=session, user_id=user_id, product=product)


def get_order(session: Session, caller: Caller, order_id: int) -> Order:
    order = crud.get_user_order(session=session, order_id=order_id, user_id=_owner_id(caller))
    if order is None:
        raise order_not_found()
    return order


def get_payment_info(
    session: Session, caller: Caller, order_id: int, *, settings: Settings
) -> PaymentInfo:
    """支付页信息：订单、商品、UPI 收款账号"""
    order = get_order(session, caller, order_id)
    product = crud.get_product(session=session, product_id=order.product_id)
    if product is None:
        raise product_not_found()
    return PaymentInfo(
        order=order,
        product=product,
        upi_id=settings.UPI_ID,
        payee_name=settings.UPI_PAYEE_NAME,
    )


def attach_payment_proof(
    session: Session,
    caller: Caller,
    order_id: int,
    *,
    upi_txn_id: str | None,
    proof_url: str | None = None,
) -> Order:
    """提交 UPI 交易号和付款截图地址（截图上传本身不在本服务内）"""
    order = get_order(session, caller, order_id)
    return crud.attach_order_payment(
        session=session, order=order, upi_txn_id=upi_txn_id, proof_url=proof_url
    )


def list_orders(
    session: Session, caller: Caller, *, page: int = 1, page_size: int = 20
) -> tuple[list[tuple[Order, Product]], int]:
    """本人订单，最新的在前"""
    return crud.list_user_orders(
        session=session,
        user_id=_owner_id(caller),
        offset=(page - 1) * page_size,
        limit=page_size,
    )
