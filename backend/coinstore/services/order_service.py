"""
订单状态流转服务

管理员修改订单状态的唯一入口。状态之间可以任意切换，
但只有订单第一次进入 PAID 时才会依次触发三个副作用：

1. 网站余额到账（必须成功，与状态写入同一事务）
2. RCON 游戏内发放 PlayerPoints（尽力而为，失败只记日志）
3. 发送发票邮件（尽力而为，失败只记日志）

"第一次"由数据库条件更新保证：判断"当前不是 PAID 且从未付过款"和写入 PAID
是同一条 UPDATE，并发的两个请求只有一个会执行到账。
订单从 PAID 改回其他状态不会扣回余额；再次改为 PAID 也不会重复发放。
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Protocol

from sqlmodel import Session

from coinstore import crud
from coinstore.enums import OrderStatus
from coinstore.integrations.rcon import FulfillmentOutcome
from coinstore.services.caller import Caller, require_admin
from coinstore.services.invoice_service import InvoiceNotifier, NotificationOutcome

logger = logging.getLogger(__name__)


class FulfillmentClient(Protocol):
    def grant(self, player: str | None, amount: int) -> FulfillmentOutcome: ...


@dataclass(frozen=True)
class TransitionReport:
    """
    一次状态修改的结果

    - applied: 状态是否写入（非法状态或订单不存在时为 False）
    - balance_credited: 本次是否触发了到账（即首次进入 PAID）
    - fulfillment / notification: 游戏内发放与发票邮件的结果，未触发时为 None
    """
    order_id: int
    applied: bool = False
    previous_status: OrderStatus | None = None
    status: OrderStatus | None = None
    balance_credited: bool = False
    fulfillment: FulfillmentOutcome | None = None
    notification: NotificationOutcome | None = None


class OrderTransitionEngine:
    def __init__(
        self,
        *,
        session: Session,
        fulfillment: FulfillmentClient,
        notifier: InvoiceNotifier,
    ) -> None:
        self.session = session
        self.fulfillment = fulfillment
        self.notifier = notifier

    def transition(
        self, caller: Caller, order_id: int, requested_status: str | OrderStatus
    ) -> TransitionReport:
        """
        修改订单状态

        非法状态值或订单不存在时不做任何修改，返回 applied=False。
        数据库错误会回滚状态与到账并向上抛出。

        Args:
            caller: 调用者（必须是管理员）
            order_id: 订单 ID
            requested_status: 目标状态（四个枚举值之一）

        Returns:
            TransitionReport: 本次修改与各副作用的结果
        """
        require_admin(caller)
        report = TransitionReport(order_id=order_id)

        status = (
            requested_status
            if isinstance(requested_status, OrderStatus)
            else OrderStatus.parse(requested_status)
        )
        if status is None:
            logger.info(f"Ignoring invalid status {requested_status!r} for order {order_id}")
            return report

        detail = crud.get_order_detail(session=self.session, order_id=order_id)
        if detail is None:
            return report

        order_no = detail.order.order_no
        previous = OrderStatus(detail.order.status)
        try:
            first_paid = self._write_status(detail, status)
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise

        report = replace(
            report,
            applied=True,
            previous_status=previous,
            status=status,
            balance_credited=first_paid,
        )
        if not first_paid:
            return report

        # 重新加载已提交的订单、用户（余额已变化）、商品
        detail = crud.get_order_detail(session=self.session, order_id=order_id)
        if detail is None:  # pragma: no cover
            return report
        logger.info(f"Order {order_no} paid, credited {detail.order.coins} coins")

        fulfillment = self._grant_in_game(detail)
        notification = self._send_invoice(detail)
        logger.info(
            f"Order {order_no} fan-out done: "
            f"points ok={fulfillment.ok}, invoice ok={notification.ok}"
        )
        return replace(report, fulfillment=fulfillment, notification=notification)

    def _write_status(self, detail: crud.OrderDetail, status: OrderStatus) -> bool:
        """写入状态；首次进入 PAID 时同时到账。返回是否首次进入 PAID"""
        order = detail.order
        if status is OrderStatus.PAID and crud.mark_order_paid_once(
            session=self.session, order_id=order.id
        ):
            crud.credit_coins(
                session=self.session,
                user_id=order.user_id,
                amount=order.coins,
                order_no=order.order_no,
            )
            return True

        crud.set_order_status(session=self.session, order_id=order.id, status=status)
        return False

    def _grant_in_game(self, detail: crud.OrderDetail) -> FulfillmentOutcome:
        outcome = self.fulfillment.grant(detail.user.minecraft_username, detail.order.coins)
        if not outcome.ok:
            # 不影响订单，只记录
            logger.warning(
                f"PlayerPoints not added for {detail.order.order_no}: "
                f"{outcome.reason} {outcome.detail or ''}".rstrip()
            )
        return outcome

    def _send_invoice(self, detail: crud.OrderDetail) -> NotificationOutcome:
        try:
            self.notifier.send_invoice(detail.order, detail.user, detail.product)
        except Exception as e:
            logger.error(f"Invoice email failed for {detail.order.order_no}: {e}")
            return NotificationOutcome(ok=False, detail=str(e))
        return NotificationOutcome(ok=True)
