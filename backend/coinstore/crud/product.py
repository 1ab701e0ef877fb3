"""商品 CRUD 操作"""
from sqlmodel import Session, col, select

from coinstore.models import Product


def get(*, session: Session, product_id: int) -> Product | None:
    return session.get(Product, product_id)


def list_products(*, session: Session, active_only: bool = False) -> list[Product]:
    """按价格从低到高列出商品"""
    stmt = select(Product)
    if active_only:
        stmt = stmt.where(col(Product.active).is_(True))
    stmt = stmt.order_by(col(Product.price_inr).asc())
    return list(session.exec(stmt).all())


def list_active_for_update(*, session: Session) -> list[Product]:
    """锁定所有上架商品的行，供批量重算积分使用"""
    stmt = (
        select(Product)
        .where(col(Product.active).is_(True))
        .order_by(col(Product.id))
        .with_for_update()
    )
    return list(session.exec(stmt).all())
