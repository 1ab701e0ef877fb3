"""
FastAPI 依赖注入模块

提供可复用的依赖项，用于路由处理函数中：
- 数据库会话
- 当前用户 / 管理员身份（从 JWT 解析，转换为显式的 Caller）
- 邮件发送器、RCON 客户端、订单状态流转引擎
"""
from collections.abc import Generator
from typing import Annotated

import jwt
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jwt.exceptions import InvalidTokenError
from pydantic import ValidationError
from sqlmodel import Session

from coinstore.api.errors import admin_required
from coinstore.api.schemas import TokenPayload
from coinstore.core import security
from coinstore.core.config import settings
from coinstore.core.db import engine
from coinstore.integrations.mailer import MailTransport
from coinstore.integrations.rcon import RconConfig, RconFulfillmentClient
from coinstore.models import User
from coinstore.services.caller import Caller
from coinstore.services.catalog_service import CatalogService
from coinstore.services.invoice_service import InvoiceNotifier
from coinstore.services.order_service import FulfillmentClient, OrderTransitionEngine

# 从请求头的 Authorization: Bearer <token> 中提取 token
reusable_oauth2 = HTTPBearer()


def get_db() -> Generator[Session, None, None]:
    """获取数据库会话，请求结束后自动关闭"""
    with Session(engine) as session:
        yield session


SessionDep = Annotated[Session, Depends(get_db)]
TokenDep = Annotated[HTTPAuthorizationCredentials, Depends(reusable_oauth2)]


def _credentials_error() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
    )


def _decode(token: HTTPAuthorizationCredentials) -> TokenPayload:
    try:
        payload = jwt.decode(
            token.credentials, settings.SECRET_KEY, algorithms=[security.ALGORITHM]
        )
        token_data = TokenPayload(**payload)
    except (InvalidTokenError, ValidationError):
        raise _credentials_error()
    if not token_data.sub:
        raise _credentials_error()
    return token_data


def get_current_user(session: SessionDep, token: TokenDep) -> User:
    """
    获取当前登录用户

    管理员令牌不能当用户令牌使用。

    Raises:
        HTTPException: token 无效、不是用户令牌或用户不存在时返回 401
    """
    token_data = _decode(token)
    if token_data.scope == security.ADMIN_SCOPE:
        raise _credentials_error()
    try:
        user_id = int(token_data.sub)  # type: ignore[arg-type]
    except ValueError:
        raise _credentials_error()
    user = session.get(User, user_id)
    if not user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="User not found")
    return user


CurrentUser = Annotated[User, Depends(get_current_user)]


def get_customer(current_user: CurrentUser) -> Caller:
    return Caller.customer(current_user.id)


def get_admin(token: TokenDep) -> Caller:
    """
    获取管理员身份

    Raises:
        HTTPException: token 无效时返回 401
        AppError: 不是管理员令牌时返回 403001
    """
    token_data = _decode(token)
    if token_data.scope != security.ADMIN_SCOPE or token_data.sub != security.ADMIN_SUBJECT:
        raise admin_required()
    return Caller.admin()


CustomerDep = Annotated[Caller, Depends(get_customer)]
AdminDep = Annotated[Caller, Depends(get_admin)]


def get_mail_transport(request: Request) -> MailTransport:
    """应用启动时创建的邮件发送器"""
    return request.app.state.mail_transport


def get_fulfillment_client() -> FulfillmentClient:
    return RconFulfillmentClient(RconConfig.from_settings(settings))


MailDep = Annotated[MailTransport, Depends(get_mail_transport)]
FulfillmentDep = Annotated[FulfillmentClient, Depends(get_fulfillment_client)]


def get_order_engine(
    session: SessionDep, transport: MailDep, fulfillment: FulfillmentDep
) -> OrderTransitionEngine:
    return OrderTransitionEngine(
        session=session,
        fulfillment=fulfillment,
        notifier=InvoiceNotifier.from_settings(transport, settings),
    )


def get_catalog(session: SessionDep) -> CatalogService:
    return CatalogService(session=session)


OrderEngineDep = Annotated[OrderTransitionEngine, Depends(get_order_engine)]
CatalogDep = Annotated[CatalogService, Depends(get_catalog)]
