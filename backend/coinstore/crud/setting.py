"""全局配置项 CRUD 操作"""
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from coinstore.models import Setting
from coinstore.services.pricing import DEFAULT_COIN_RATE

COIN_RATE_KEY = "conversionRate"


def _get(session: Session, key: str, *, for_update: bool = False) -> Setting | None:
    stmt = select(Setting).where(Setting.key == key)
    if for_update:
        stmt = stmt.with_for_update()
    return session.exec(stmt).first()


def get_coin_rate(*, session: Session, default: int = DEFAULT_COIN_RATE) -> int:
    """
    读取兑换比例，不存在则写入默认值

    两个请求同时首次读取时，后写入的一方会撞唯一索引，回滚后重读即可。
    存的值为空或 0 时按默认值处理。
    """
    row = _get(session, COIN_RATE_KEY)
    if row is None:
        session.add(Setting(key=COIN_RATE_KEY, int_value=default))
        try:
            session.commit()
        except IntegrityError:
            session.rollback()
        row = _get(session, COIN_RATE_KEY)
    if row is None or not row.int_value:
        return default
    return row.int_value


def set_coin_rate(*, session: Session, rate: int) -> Setting:
    """写入兑换比例（upsert）。不提交事务"""
    row = _get(session, COIN_RATE_KEY, for_update=True)
    if row is None:
        row = Setting(key=COIN_RATE_KEY, int_value=rate)
    else:
        row.int_value = rate
    session.add(row)
    session.flush()
    return row
