"""
API 路由聚合模块

将所有业务路由模块聚合到一个统一的 router 中，注册到主应用（coinstore/main.py）上。

路由模块说明：
- auth: 用户登录、管理员登录
- user: 用户资料（含余额）
- shop: 商品列表、下单
- orders: 本人订单、支付信息、提交付款凭证
- admin: 管理后台（订单状态、兑换比例、商品）
- utils: 健康检查
"""
from fastapi import APIRouter

from coinstore.api.routes import (
    admin,
    auth,
    orders,
    shop,
    user,
    utils,
)

api_router = APIRouter()

api_router.include_router(auth.router)  # /auth/*
api_router.include_router(user.router)  # /user/*
api_router.include_router(shop.router)  # /shop/*
api_router.include_router(orders.router)  # /order/*
api_router.include_router(admin.router)  # /admin/*
api_router.include_router(utils.router)  # /utils/*
