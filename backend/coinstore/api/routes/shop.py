"""
商店路由模块

- 浏览上架商品与当前兑换比例
- 下单购买积分包
"""
from __future__ import annotations

from fastapi import APIRouter

from coinstore.api.deps import CustomerDep, SessionDep
from coinstore.api.routes.orders import to_order_data
from coinstore.api.schemas import ApiEnvelope, ProductPublic, ShopData
from coinstore.services import checkout_service

router = APIRouter(prefix="/shop", tags=["shop"])


@router.get("", response_model=ApiEnvelope)
def shop(session: SessionDep, caller: CustomerDep) -> ApiEnvelope:
    """
    商品列表（按价格升序）

    请求路径: GET /api/v1/shop
    """
    view = checkout_service.list_shop(session, caller)
    data = ShopData(
        products=[ProductPublic.model_validate(p, from_attributes=True) for p in view.products],
        coin_rate=view.coin_rate,
    )
    return ApiEnvelope(data=data)


@router.post("/buy/{product_id}", response_model=ApiEnvelope)
def buy(session: SessionDep, caller: CustomerDep, product_id: int) -> ApiEnvelope:
    """
    下单

    订单创建后处于 PENDING_VERIFICATION，价格与积分按商品当前值快照。

    请求路径: POST /api/v1/shop/buy/{product_id}
    """
    order = checkout_service.create_order(session, caller, product_id)
    return ApiEnvelope(data=to_order_data(order))
