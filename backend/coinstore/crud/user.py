"""用户 CRUD 操作"""
from sqlalchemy import update
from sqlmodel import Session, or_, select

from coinstore.api.errors import user_not_found
from coinstore.core.security import get_password_hash
from coinstore.enums import CoinTransactionType
from coinstore.models import CoinTransaction, User


def get(*, session: Session, user_id: int) -> User | None:
    return session.get(User, user_id)


def get_by_email(*, session: Session, email: str) -> User | None:
    """根据邮箱查询用户（邮箱统一小写存储）"""
    statement = select(User).where(User.email == email.strip().lower())
    return session.exec(statement).first()


def get_by_login(*, session: Session, identifier: str) -> User | None:
    """登录时既可以填邮箱，也可以填姓名"""
    identifier = identifier.strip()
    statement = select(User).where(
        or_(User.email == identifier.lower(), User.name == identifier)
    )
    return session.exec(statement).first()


def create(
    *,
    session: Session,
    email: str,
    name: str,
    password: str,
    minecraft_username: str = "",
    phone: str = "",
) -> User:
    """创建用户，余额从 0 开始"""
    user = User(
        email=email.strip().lower(),
        name=name.strip(),
        minecraft_username=minecraft_username.strip(),
        phone=phone.strip(),
        password_hash=get_password_hash(password),
        coin_balance=0,
    )
    session.add(user)
    session.commit()
    session.refresh(user)
    return user


def credit_coins(*, session: Session, user_id: int, amount: int, order_no: str) -> None:
    """
    给用户余额加上 amount，并写一条到账流水

    余额在数据库里原子递增（UPDATE ... SET coin_balance = coin_balance + n），
    不在应用层读改写。不提交事务，由调用方与订单状态一起提交。

    Raises:
        AppError: 用户不存在
    """
    result = session.exec(  # type: ignore[call-overload]
        update(User)
        .where(User.id == user_id)
        .values(coin_balance=User.coin_balance + amount)
    )
    if result.rowcount != 1:
        raise user_not_found()
    session.add(
        CoinTransaction(
            user_id=user_id,
            type=CoinTransactionType.purchase,
            amount=amount,
            order_no=order_no,
        )
    )
    session.flush()
