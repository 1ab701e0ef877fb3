"""
认证路由模块

- 用户：邮箱或姓名 + 密码登录（注册与找回密码不在本服务内）
- 管理员：ADMIN_EMAIL / ADMIN_PASSWORD 登录，签发 scope=admin 的令牌
"""
from __future__ import annotations

from datetime import timedelta

from fastapi import APIRouter

from coinstore import crud
from coinstore.api.deps import SessionDep
from coinstore.api.errors import bad_credentials
from coinstore.api.routes.user import to_profile
from coinstore.api.schemas import AdminLoginRequest, ApiEnvelope, AuthLoginData, LoginRequest
from coinstore.core import security
from coinstore.core.config import settings

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/login", response_model=ApiEnvelope)
def login(session: SessionDep, body: LoginRequest) -> ApiEnvelope:
    """
    用户登录接口

    请求路径: POST /api/v1/auth/login

    Raises:
        AppError: 用户不存在或密码错误时返回 401001
    """
    user = crud.get_user_by_login(session=session, identifier=body.identifier)
    if not user or not security.verify_password(body.password, user.password_hash):
        raise bad_credentials()

    access_token_expires = timedelta(days=settings.ACCESS_TOKEN_EXPIRE_DAYS)
    token = security.create_access_token(user.id, expires_delta=access_token_expires)
    data = AuthLoginData(
        access_token=token,
        expires_in=int(access_token_expires.total_seconds()),
        user=to_profile(user),
    )
    return ApiEnvelope(data=data)


@router.post("/admin/login", response_model=ApiEnvelope)
def admin_login(body: AdminLoginRequest) -> ApiEnvelope:
    """
    管理员登录接口

    请求路径: POST /api/v1/auth/admin/login
    """
    if not security.verify_admin_credentials(body.email, body.password):
        raise bad_credentials()

    access_token_expires = timedelta(days=settings.ACCESS_TOKEN_EXPIRE_DAYS)
    token = security.create_access_token(
        security.ADMIN_SUBJECT,
        expires_delta=access_token_expires,
        scope=security.ADMIN_SCOPE,
    )
    data = AuthLoginData(access_token=token, expires_in=int(access_token_expires.total_seconds()))
    return ApiEnvelope(data=data)
