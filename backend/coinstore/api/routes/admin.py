"""
管理后台路由模块

对外只暴露三类核心操作：修改订单状态、修改兑换比例、重算商品积分；
另外提供后台总览和手工编辑商品。所有接口都需要管理员令牌。
"""
from __future__ import annotations

from dataclasses import asdict

from fastapi import APIRouter

from coinstore import crud
from coinstore.api.deps import AdminDep, CatalogDep, OrderEngineDep, SessionDep
from coinstore.api.errors import (
    invalid_product_fields,
    invalid_status,
    order_not_found,
    product_not_found,
    rate_out_of_range,
)
from coinstore.api.routes.orders import to_order_data
from coinstore.api.schemas import (
    AdminOrderData,
    ApiEnvelope,
    DashboardData,
    FulfillmentData,
    NotificationData,
    OrderStatusRequest,
    ProductPublic,
    ProductUpdateRequest,
    RateUpdateData,
    RateUpdateRequest,
    TransitionData,
)
from coinstore.enums import OrderStatus

router = APIRouter(prefix="/admin", tags=["admin"])


@router.get("/dashboard", response_model=ApiEnvelope)
def dashboard(caller: AdminDep, session: SessionDep, catalog: CatalogDep) -> ApiEnvelope:
    """
    后台总览：全部订单（含用户、商品）、全部商品、当前兑换比例

    请求路径: GET /api/v1/admin/dashboard
    """
    orders = [
        AdminOrderData(
            **to_order_data(d.order, d.product).model_dump(),
            user_id=d.user.id,
            user_name=d.user.name,
            user_email=d.user.email,
            minecraft_username=d.user.minecraft_username,
        )
        for d in crud.list_order_details(session=session)
    ]
    products = [
        ProductPublic.model_validate(p, from_attributes=True)
        for p in crud.list_products(session=session)
    ]
    data = DashboardData(orders=orders, products=products, coin_rate=catalog.current_rate())
    return ApiEnvelope(data=data)


@router.post("/order/{order_id}/status", response_model=ApiEnvelope)
def update_order_status(
    caller: AdminDep, engine: OrderEngineDep, order_id: int, body: OrderStatusRequest
) -> ApiEnvelope:
    """
    修改订单状态

    状态值必须是 CREATED / PENDING_VERIFICATION / PAID / REJECTED 之一。
    首次改为 PAID 时到账、游戏内发放、发送发票；后两者失败不影响结果。

    请求路径: POST /api/v1/admin/order/{order_id}/status

    Raises:
        AppError: 非法状态（400101）、订单不存在（404101）
    """
    status = OrderStatus.parse(body.status)
    if status is None:
        raise invalid_status()

    report = engine.transition(caller, order_id, status)
    if not report.applied:
        raise order_not_found()

    data = TransitionData(
        order_id=report.order_id,
        previous_status=report.previous_status,
        status=report.status,
        balance_credited=report.balance_credited,
        fulfillment=(
            FulfillmentData(**asdict(report.fulfillment)) if report.fulfillment else None
        ),
        notification=(
            NotificationData(**asdict(report.notification)) if report.notification else None
        ),
    )
    return ApiEnvelope(data=data)


@router.post("/settings/rate", response_model=ApiEnvelope)
def update_rate(caller: AdminDep, catalog: CatalogDep, body: RateUpdateRequest) -> ApiEnvelope:
    """
    修改兑换比例，recalc=true 时同时重算所有上架商品

    请求路径: POST /api/v1/admin/settings/rate
    """
    result = catalog.update_rate(caller, body.coin_rate, recalc=body.recalc)
    if result is None:
        raise rate_out_of_range()
    return ApiEnvelope(data=RateUpdateData(coin_rate=result.rate, repriced=result.repriced))


@router.post("/product/{product_id}/update", response_model=ApiEnvelope)
def update_product(
    caller: AdminDep,
    session: SessionDep,
    catalog: CatalogDep,
    product_id: int,
    body: ProductUpdateRequest,
) -> ApiEnvelope:
    """
    手工编辑商品

    请求路径: POST /api/v1/admin/product/{product_id}/update
    """
    if crud.get_product(session=session, product_id=product_id) is None:
        raise product_not_found()
    product = catalog.update_product(
        caller,
        product_id,
        name=body.name,
        price_inr=body.price_inr,
        coins=body.coins,
        active=body.active,
        best_seller=body.best_seller,
    )
    if product is None:
        raise invalid_product_fields()
    return ApiEnvelope(data=ProductPublic.model_validate(product, from_attributes=True))


@router.post("/product/{product_id}/recalc", response_model=ApiEnvelope)
def recalc_product(
    caller: AdminDep, session: SessionDep, catalog: CatalogDep, product_id: int
) -> ApiEnvelope:
    """
    按当前兑换比例重算商品积分

    请求路径: POST /api/v1/admin/product/{product_id}/recalc

    Raises:
        AppError: 商品不存在（404201）、存储的比例越界（400201）
    """
    if crud.get_product(session=session, product_id=product_id) is None:
        raise product_not_found()
    product = catalog.recalc_product(caller, product_id)
    if product is None:
        raise rate_out_of_range()
    return ApiEnvelope(data=ProductPublic.model_validate(product, from_attributes=True))
