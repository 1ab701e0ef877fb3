"""
Minecraft RCON 集成模块

订单首次变为 PAID 时，通过 RCON 在游戏服务器上执行一条命令，
给玩家发放等量的 PlayerPoints。

每次发放都是一次短连接：连接 -> 认证 -> 发送一条命令 -> 断开。
任何失败（未配置、没有玩家名、连接/认证/超时/协议错误）都只会体现在
返回的 FulfillmentOutcome 里，不会抛给调用方：游戏服务器不可用时，
网站余额和发票照常处理。
"""
from __future__ import annotations

import logging
import math
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any

from rcon.source import Client

from coinstore.core.config import Settings
from coinstore.enums import FulfillmentReason

logger = logging.getLogger(__name__)

DEFAULT_COMMAND = "playerpoints give {player} {amount}"
DEFAULT_PORT = 25575
DEFAULT_TIMEOUT_MS = 8000


@dataclass(frozen=True)
class RconConfig:
    """
    RCON 连接配置

    host 或 password 为空表示关闭游戏内发放。
    """
    host: str | None = None
    port: int = DEFAULT_PORT
    password: str | None = None
    command_template: str = DEFAULT_COMMAND
    timeout_ms: int = DEFAULT_TIMEOUT_MS

    @property
    def enabled(self) -> bool:
        return bool(self.host and self.password)

    @classmethod
    def from_settings(cls, settings: Settings) -> RconConfig:
        return cls(
            host=settings.RCON_HOST,
            port=settings.RCON_PORT,
            password=settings.RCON_PASSWORD,
            command_template=settings.PLAYERPOINTS_COMMAND,
            timeout_ms=settings.RCON_TIMEOUT_MS,
        )


@dataclass(frozen=True)
class FulfillmentOutcome:
    """
    一次游戏内发放的结果

    - ok: 是否成功
    - reason: 失败原因（成功时为 None）
    - detail: 错误信息（RCON_ERROR 时）
    - command: 实际发送的命令
    - response: 服务器返回的文本
    """
    ok: bool
    reason: FulfillmentReason | None = None
    detail: str | None = None
    command: str | None = None
    response: str | None = None


def build_command(template: str, player: str | None, amount: Any) -> str:
    """
    把玩家名和数量填入命令模板

    数量向下取整，且不小于 0；无法解析的数量按 0 处理。
    """
    safe_player = (player or "").strip()
    try:
        number = float(amount)
    except (TypeError, ValueError):
        number = 0.0
    safe_amount = max(0, math.floor(number)) if math.isfinite(number) else 0
    return template.replace("{player}", safe_player).replace("{amount}", str(safe_amount))


class RconFulfillmentClient:
    """
    RCON 发放客户端

    client_factory 默认是 rcon 库的 Source RCON 客户端，测试时可以替换。
    """

    def __init__(
        self,
        config: RconConfig,
        *,
        client_factory: Callable[..., Client] = Client,
    ) -> None:
        self.config = config
        self._client_factory = client_factory

    @contextmanager
    def _session(self) -> Iterator[Client]:
        """建立已认证的连接，无论成功与否退出时都会关闭"""
        client = self._client_factory(
            self.config.host,
            self.config.port,
            timeout=self.config.timeout_ms / 1000,
            passwd=self.config.password,
        )
        try:
            client.connect(login=True)
            yield client
        finally:
            try:
                client.close()
            except Exception as e:  # socket may never have been opened
                logger.debug(f"RCON close failed: {e}")

    def grant(self, player: str | None, amount: Any) -> FulfillmentOutcome:
        """
        给玩家发放 PlayerPoints

        Args:
            player: 游戏内用户名
            amount: 发放数量

        Returns:
            FulfillmentOutcome: 发放结果，永不抛出异常
        """
        if not self.config.enabled:
            logger.warning(
                "RCON not configured (RCON_HOST/RCON_PASSWORD missing). Skipping PlayerPoints."
            )
            return FulfillmentOutcome(ok=False, reason=FulfillmentReason.NOT_CONFIGURED)

        if not (player or "").strip():
            logger.warning("Missing minecraft username, cannot give PlayerPoints.")
            return FulfillmentOutcome(ok=False, reason=FulfillmentReason.NO_PLAYER)

        command = build_command(self.config.command_template, player, amount)
        try:
            with self._session() as client:
                response = client.run(command)
        except Exception as e:
            logger.error(f"RCON give PlayerPoints failed: {e}")
            return FulfillmentOutcome(
                ok=False,
                reason=FulfillmentReason.RCON_ERROR,
                detail=str(e) or e.__class__.__name__,
                command=command,
            )

        logger.info(f"RCON PlayerPoints sent: {command} | resp: {response}")
        return FulfillmentOutcome(ok=True, command=command, response=response)
