"""订单 CRUD 操作"""
import secrets
import string
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import update
from sqlmodel import Session, col, func, select

from coinstore.enums import OrderStatus, PaymentMethod
from coinstore.models import Order, Product, User, to_ist, utc_now

_ORDER_NO_ALPHABET = string.ascii_uppercase + string.digits


@dataclass
class OrderDetail:
    """订单连同所属用户和商品"""
    order: Order
    user: User
    product: Product


def make_order_no(now: datetime | None = None) -> str:
    """生成订单号：NC-YYYYMMDD-XXXXXX（日期按印度时间）"""
    day = to_ist(now or utc_now()).strftime("%Y%m%d")
    suffix = "".join(secrets.choice(_ORDER_NO_ALPHABET) for _ in range(6))
    return f"NC-{day}-{suffix}"


def create(*, session: Session, user_id: int, product: Product) -> Order:
    """下单：快照商品当前价格和积分，状态为待核验"""
    order = Order(
        order_no=make_order_no(),
        user_id=user_id,
        product_id=product.id,
        price_inr=product.price_inr,
        coins=product.coins,
        status=OrderStatus.PENDING_VERIFICATION,
        payment_method=PaymentMethod.UPI_GPAY.value,
    )
    session.add(order)
    session.commit()
    session.refresh(order)
    return order


def get_for_user(*, session: Session, order_id: int, user_id: int) -> Order | None:
    """只返回属于该用户的订单"""
    order = session.get(Order, order_id)
    if order is None or order.user_id != user_id:
        return None
    return order


def list_for_user(
    *, session: Session, user_id: int, offset: int = 0, limit: int = 20
) -> tuple[list[tuple[Order, Product]], int]:
    count = session.exec(
        select(func.count()).select_from(Order).where(Order.user_id == user_id)
    ).one()
    rows = session.exec(
        select(Order, Product)
        .join(Product, col(Product.id) == col(Order.product_id))
        .where(Order.user_id == user_id)
        .order_by(col(Order.created_at).desc())
        .offset(offset)
        .limit(limit)
    ).all()
    return [(o, p) for o, p in rows], count


def _detail_query():
    return (
        select(Order, User, Product)
        .join(User, col(User.id) == col(Order.user_id))
        .join(Product, col(Product.id) == col(Order.product_id))
    )


def get_detail(*, session: Session, order_id: int) -> OrderDetail | None:
    row = session.exec(_detail_query().where(Order.id == order_id)).first()
    if row is None:
        return None
    order, user, product = row
    return OrderDetail(order=order, user=user, product=product)


def list_details(*, session: Session) -> list[OrderDetail]:
    """管理后台：全部订单，最新的在前"""
    rows = session.exec(_detail_query().order_by(col(Order.created_at).desc())).all()
    return [OrderDetail(order=o, user=u, product=p) for o, u, p in rows]


def mark_paid_once(*, session: Session, order_id: int) -> bool:
    """
    条件更新：仅当订单当前不是 PAID 且从未付过款时改为 PAID

    这是到账幂等的关键，判断与写入在同一条 UPDATE 里完成，
    两个并发请求只有一个能拿到 rowcount == 1。不提交事务。

    Returns:
        本次是否为首次进入 PAID
    """
    now = utc_now()
    result = session.exec(  # type: ignore[call-overload]
        update(Order)
        .where(
            col(Order.id) == order_id,
            col(Order.status) != OrderStatus.PAID.value,
            col(Order.paid_at).is_(None),
        )
        .values(status=OrderStatus.PAID.value, paid_at=now, updated_at=now)
    )
    return result.rowcount == 1


def set_status(*, session: Session, order_id: int, status: OrderStatus) -> bool:
    """无条件写入状态（PAID -> PAID 也照写）。不提交事务"""
    result = session.exec(  # type: ignore[call-overload]
        update(Order)
        .where(col(Order.id) == order_id)
        .values(status=status.value, updated_at=utc_now())
    )
    return result.rowcount == 1


def attach_payment(
    *, session: Session, order: Order, upi_txn_id: str | None, proof_url: str | None
) -> Order:
    """
    记录用户提交的付款信息

    交易号为空串时清空；没有新截图时保留原来的截图地址。
    """
    order.upi_txn_id = (upi_txn_id or "").strip() or None
    if proof_url:
        order.payment_proof_url = proof_url
    order.updated_at = utc_now()
    session.add(order)
    session.commit()
    session.refresh(order)
    return order
