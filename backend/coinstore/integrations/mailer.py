"""
邮件发送集成模块

通过 SMTP 发送 HTML 邮件（发票）。使用 emails 库组装和投递消息。

SMTP 未配置属于启动时的配置错误（MailConfigError，本地环境例外），
单次发送被服务器拒绝时抛出 MailError。
"""
from __future__ import annotations

import logging
from typing import Protocol

import emails  # type: ignore[import-untyped]

from coinstore.core.config import Settings

logger = logging.getLogger(__name__)


class MailError(Exception):
    """邮件发送失败（认证失败、连接失败、服务器拒收等）"""


class MailConfigError(MailError):
    """SMTP 配置缺失"""


class MailTransport(Protocol):
    def send(self, *, to: str, subject: str, html: str) -> None: ...


class SmtpMailTransport:
    """基于 emails 库的 SMTP 发送器"""

    def __init__(
        self,
        *,
        host: str,
        port: int,
        user: str | None,
        password: str | None,
        from_email: str,
        from_name: str,
        use_tls: bool = True,
        use_ssl: bool = False,
    ) -> None:
        self.host = host
        self.port = port
        self.user = user
        self.password = password
        self.from_email = from_email
        self.from_name = from_name
        # 465 端口走 SSL，其余端口按配置走 STARTTLS
        self.use_ssl = use_ssl or port == 465
        self.use_tls = use_tls and not self.use_ssl

    @classmethod
    def from_settings(cls, settings: Settings) -> SmtpMailTransport:
        """
        根据配置创建发送器

        Raises:
            MailConfigError: SMTP_HOST / SMTP_USER / SMTP_PASSWORD 缺失时
        """
        if not settings.emails_enabled:
            raise MailConfigError(
                "Missing SMTP settings (SMTP_HOST/SMTP_USER/SMTP_PASSWORD)."
            )
        return cls(
            host=settings.SMTP_HOST,  # type: ignore[arg-type]
            port=settings.SMTP_PORT,
            user=settings.SMTP_USER,
            password=settings.SMTP_PASSWORD,
            from_email=settings.EMAILS_FROM_EMAIL or settings.SMTP_USER,  # type: ignore[arg-type]
            from_name=settings.EMAILS_FROM_NAME or settings.STORE_NAME,
            use_tls=settings.SMTP_TLS,
            use_ssl=settings.SMTP_SSL,
        )

    def _smtp_options(self) -> dict[str, object]:
        options: dict[str, object] = {"host": self.host, "port": self.port}
        if self.use_tls:
            options["tls"] = True
        elif self.use_ssl:
            options["ssl"] = True
        if self.user:
            options["user"] = self.user
        if self.password:
            options["password"] = self.password
        return options

    def send(self, *, to: str, subject: str, html: str) -> None:
        """
        发送一封 HTML 邮件

        Raises:
            MailError: 服务器未返回 250 时
        """
        message = emails.Message(
            subject=subject,
            html=html,
            mail_from=(self.from_name, self.from_email),
        )
        response = message.send(to=to, smtp=self._smtp_options())
        logger.info(f"send email result: {response}")
        if response.status_code != 250:
            reason = response.error or response.status_text or "no response"
            raise MailError(f"SMTP rejected mail to {to}: {response.status_code} {reason}")


class UnconfiguredMailTransport:
    """本地开发未配置 SMTP 时使用：每次发送都失败，由调用方记录日志"""

    def send(self, *, to: str, subject: str, html: str) -> None:
        raise MailConfigError(
            "Missing SMTP settings (SMTP_HOST/SMTP_USER/SMTP_PASSWORD)."
        )


def build_mail_transport(settings: Settings) -> MailTransport:
    """
    应用启动时调用

    非本地环境缺少 SMTP 配置直接让启动失败；本地环境只警告，发票发送时再报错。
    """
    try:
        transport = SmtpMailTransport.from_settings(settings)
    except MailConfigError:
        if settings.ENVIRONMENT != "local":
            raise
        logger.warning("SMTP not configured, invoice emails will fail until it is set.")
        return UnconfiguredMailTransport()
    logger.info(f"Mail transport ready: {transport.host}:{transport.port}")
    return transport
