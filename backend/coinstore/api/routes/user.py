"""
用户路由模块

处理用户资料相关的 API 端点。
"""
from __future__ import annotations

from fastapi import APIRouter

from coinstore.api.deps import CurrentUser
from coinstore.api.schemas import ApiEnvelope, UserProfile
from coinstore.models import User

router = APIRouter(prefix="/user", tags=["user"])


def to_profile(user: User) -> UserProfile:
    return UserProfile(
        id=user.id,
        email=user.email,
        name=user.name,
        minecraft_username=user.minecraft_username,
        phone=user.phone,
        coin_balance=user.coin_balance,
    )


@router.get("/profile", response_model=ApiEnvelope)
def profile(current_user: CurrentUser) -> ApiEnvelope:
    """
    获取当前用户资料（含网站余额）

    请求路径: GET /api/v1/user/profile
    """
    return ApiEnvelope(data=to_profile(current_user))
