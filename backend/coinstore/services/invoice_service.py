"""
发票通知服务

把订单、用户、商品渲染成 HTML 发票（Jinja2 模板 email-templates/invoice.html），
并通过邮件发送到用户注册邮箱。这里只做格式化，不做任何计算。
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, select_autoescape

from coinstore.core.config import Settings
from coinstore.integrations.mailer import MailTransport
from coinstore.models import Order, Product, User, to_ist

logger = logging.getLogger(__name__)

TEMPLATES_DIR = Path(__file__).resolve().parents[1] / "email-templates"

_env = Environment(
    loader=FileSystemLoader(str(TEMPLATES_DIR)),
    autoescape=select_autoescape(["html"]),
)


@dataclass(frozen=True)
class NotificationOutcome:
    """发票邮件的发送结果"""
    ok: bool
    detail: str | None = None


def format_inr(amount: int) -> str:
    return f"₹{amount}"


def format_invoice_date(value: datetime) -> str:
    """印度本地时间，形如 18/10/2026, 5:46:12 pm"""
    local = to_ist(value)
    hour = local.hour % 12 or 12
    meridiem = "am" if local.hour < 12 else "pm"
    return f"{local:%d/%m/%Y}, {hour}:{local:%M:%S} {meridiem}"


def render_invoice(
    *,
    order: Order,
    user: User,
    product: Product,
    store_name: str,
    store_subtitle: str,
) -> str:
    template = _env.get_template("invoice.html")
    return template.render(
        store_name=store_name,
        store_subtitle=store_subtitle,
        order_date=format_invoice_date(order.created_at),
        user_name=user.name,
        user_email=user.email,
        player=user.minecraft_username,
        phone=user.phone,
        order_no=order.order_no,
        status=getattr(order.status, "value", order.status),
        payment_method=order.payment_method or "UPI",
        upi_txn_id=order.upi_txn_id or "-",
        product_name=product.name,
        coins=order.coins,
        price=format_inr(order.price_inr),
        total=format_inr(order.price_inr),
    )


class InvoiceNotifier:
    """渲染并发送发票邮件"""

    def __init__(
        self,
        transport: MailTransport,
        *,
        store_name: str = "NamoCoins Store",
        store_subtitle: str = "Minecraft Coin Shop",
    ) -> None:
        self.transport = transport
        self.store_name = store_name
        self.store_subtitle = store_subtitle

    @classmethod
    def from_settings(cls, transport: MailTransport, settings: Settings) -> InvoiceNotifier:
        return cls(
            transport,
            store_name=settings.STORE_NAME,
            store_subtitle=settings.STORE_SUBTITLE,
        )

    def subject_for(self, order: Order) -> str:
        return f"Invoice - {order.order_no} ({self.store_name})"

    def send_invoice(self, order: Order, user: User, product: Product) -> None:
        """
        发送发票

        Raises:
            MailError: 邮件服务拒绝时（调用方应记录日志后继续）
        """
        html = render_invoice(
            order=order,
            user=user,
            product=product,
            store_name=self.store_name,
            store_subtitle=self.store_subtitle,
        )
        self.transport.send(to=user.email, subject=self.subject_for(order), html=html)
        logger.info(f"Invoice sent: {order.order_no} -> {user.email}")
