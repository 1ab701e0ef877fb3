"""
安全工具模块

- JWT 令牌签发（用户令牌与管理员令牌，通过 scope 区分）
- 密码哈希与校验（bcrypt）
"""
import hmac
from datetime import datetime, timedelta, timezone
from typing import Any

import jwt
from passlib.context import CryptContext

from coinstore.core.config import settings

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


ALGORITHM = "HS256"
ADMIN_SCOPE = "admin"
USER_SCOPE = "user"
ADMIN_SUBJECT = "admin"


def create_access_token(
    subject: str | Any, expires_delta: timedelta, scope: str = USER_SCOPE
) -> str:
    expire = datetime.now(timezone.utc) + expires_delta
    to_encode = {"exp": expire, "sub": str(subject), "scope": scope}
    encoded_jwt = jwt.encode(to_encode, settings.SECRET_KEY, algorithm=ALGORITHM)
    return encoded_jwt


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def verify_admin_credentials(email: str, password: str) -> bool:
    """比对 ADMIN_EMAIL / ADMIN_PASSWORD；任一未配置时一律拒绝"""
    if not settings.ADMIN_EMAIL or not settings.ADMIN_PASSWORD:
        return False
    email_ok = hmac.compare_digest(email.encode(), settings.ADMIN_EMAIL.encode())
    password_ok = hmac.compare_digest(password.encode(), settings.ADMIN_PASSWORD.encode())
    return email_ok and password_ok
