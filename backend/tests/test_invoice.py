from __future__ import annotations

from datetime import datetime, timezone

import pytest

from coinstore.core.config import Settings
from coinstore.integrations import mailer
from coinstore.integrations.mailer import (
    MailConfigError,
    MailError,
    SmtpMailTransport,
    build_mail_transport,
)
from coinstore.models import Order, Product, User
from coinstore.services.invoice_service import (
    InvoiceNotifier,
    format_inr,
    format_invoice_date,
    render_invoice,
)


def _invoice_parts(**user_overrides):
    user = User(
        id=1,
        email="steve@example.com",
        name="Steve Player",
        minecraft_username="Steve",
        phone="9876543210",
        password_hash="x",
    )
    for key, value in user_overrides.items():
        setattr(user, key, value)
    product = Product(id=2, sku="NAMO-99", name="NamoCoins Pack 99", price_inr=99, coins=174)
    order = Order(
        id=3,
        order_no="NC-20261018-AB12CD",
        user_id=1,
        product_id=2,
        price_inr=99,
        coins=174,
        status="PAID",
        created_at=datetime(2026, 10, 18, 12, 16, 12, tzinfo=timezone.utc),
    )
    return order, user, product


def test_format_helpers():
    assert format_inr(99) == "₹99"
    assert format_invoice_date(datetime(2026, 10, 18, 12, 16, 12, tzinfo=timezone.utc)) == (
        "18/10/2026, 5:46:12 pm"
    )
    # SQLite hands back naive datetimes; they are UTC
    assert format_invoice_date(datetime(2026, 10, 18, 18, 30, 0)) == "19/10/2026, 12:00:00 am"


def test_render_invoice_contains_order_details():
    order, user, product = _invoice_parts()

    html = render_invoice(
        order=order,
        user=user,
        product=product,
        store_name="NamoCoins Store",
        store_subtitle="Minecraft Coin Shop",
    )

    assert "NC-20261018-AB12CD" in html
    assert "NamoCoins Pack 99" in html
    assert "174" in html
    assert "₹99" in html
    assert "MC: Steve" in html
    assert "steve@example.com" in html
    assert "18/10/2026, 5:46:12 pm" in html
    assert "UPI_GPAY" in html
    # no transaction id submitted
    assert "<b>UPI Txn:</b> -" in html


def test_render_invoice_escapes_user_fields():
    order, user, product = _invoice_parts(name="<script>alert(1)</script>")

    html = render_invoice(
        order=order, user=user, product=product, store_name="S", store_subtitle="T"
    )

    assert "<script>" not in html
    assert "&lt;script&gt;" in html


def test_notifier_sends_to_user_email():
    sent = []

    class _Transport:
        def send(self, *, to, subject, html):
            sent.append((to, subject, html))

    order, user, product = _invoice_parts()
    notifier = InvoiceNotifier(_Transport(), store_name="NamoCoins Store")

    notifier.send_invoice(order, user, product)

    ((to, subject, html),) = sent
    assert to == "steve@example.com"
    assert subject == "Invoice - NC-20261018-AB12CD (NamoCoins Store)"
    assert "NC-20261018-AB12CD" in html


def test_notifier_from_settings_uses_store_branding():
    settings = Settings(STORE_NAME="Creeper Coins", STORE_SUBTITLE="Survival SMP")
    notifier = InvoiceNotifier.from_settings(object(), settings)  # type: ignore[arg-type]

    order, _, _ = _invoice_parts()
    assert notifier.subject_for(order) == "Invoice - NC-20261018-AB12CD (Creeper Coins)"
    assert notifier.store_subtitle == "Survival SMP"


def test_missing_smtp_settings_fail_at_startup():
    settings = Settings(
        ENVIRONMENT="production", SMTP_HOST=None, SMTP_USER=None, SMTP_PASSWORD=None
    )
    assert not settings.emails_enabled
    with pytest.raises(MailConfigError):
        build_mail_transport(settings)


def test_missing_smtp_settings_in_local_fail_per_send():
    settings = Settings(ENVIRONMENT="local", SMTP_HOST=None)

    transport = build_mail_transport(settings)

    with pytest.raises(MailConfigError):
        transport.send(to="steve@example.com", subject="Hi", html="<p>x</p>")


def test_transport_from_settings_defaults_sender():
    settings = Settings(
        SMTP_HOST="smtp.example.com",
        SMTP_USER="store@example.com",
        SMTP_PASSWORD="pw",
        SMTP_PORT=465,
        EMAILS_FROM_EMAIL=None,
        EMAILS_FROM_NAME=None,
        STORE_NAME="NamoCoins Store",
    )

    transport = SmtpMailTransport.from_settings(settings)

    assert transport.from_email == "store@example.com"
    assert transport.from_name == "NamoCoins Store"
    assert transport.use_ssl and not transport.use_tls


class _FakeResponse:
    def __init__(self, status_code, error=None, status_text=None):
        self.status_code = status_code
        self.error = error
        self.status_text = status_text


def _transport(port=587) -> SmtpMailTransport:
    return SmtpMailTransport(
        host="smtp.example.com",
        port=port,
        user="store@example.com",
        password="pw",
        from_email="store@example.com",
        from_name="NamoCoins Store",
    )


def test_send_uses_starttls_options(monkeypatch):
    calls = {}

    class _Message:
        def __init__(self, **kwargs):
            calls["message"] = kwargs

        def send(self, *, to, smtp):
            calls["to"] = to
            calls["smtp"] = smtp
            return _FakeResponse(250)

    monkeypatch.setattr(mailer.emails, "Message", _Message)

    _transport().send(to="steve@example.com", subject="Hi", html="<p>x</p>")

    assert calls["to"] == "steve@example.com"
    assert calls["message"]["mail_from"] == ("NamoCoins Store", "store@example.com")
    assert calls["smtp"] == {
        "host": "smtp.example.com",
        "port": 587,
        "tls": True,
        "user": "store@example.com",
        "password": "pw",
    }


def test_send_raises_when_server_rejects(monkeypatch):
    class _Message:
        def __init__(self, **kwargs):
            pass

        def send(self, *, to, smtp):
            return _FakeResponse(535, error="Authentication failed")

    monkeypatch.setattr(mailer.emails, "Message", _Message)

    with pytest.raises(MailError, match="535"):
        _transport(port=465).send(to="steve@example.com", subject="Hi", html="<p>x</p>")
