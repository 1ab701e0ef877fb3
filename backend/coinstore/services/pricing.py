"""
积分定价

积分 = round(价格 × 兑换比例) + 奖励积分；入门包（45 卢比）不送奖励积分。
纯函数，不读数据库，兑换比例由调用方传入。
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

FIRST_PACK_PRICE = 45
BONUS_COINS = 10
DEFAULT_COIN_RATE = 9  # 1 INR = 9 NamoCoins
MAX_COIN_RATE = 1000


@dataclass(frozen=True)
class PricingConfig:
    first_pack_price: int = FIRST_PACK_PRICE
    bonus_coins: int = BONUS_COINS
    default_rate: int = DEFAULT_COIN_RATE
    max_rate: int = MAX_COIN_RATE


DEFAULT_PRICING = PricingConfig()


def round_half_up(value: Any) -> int:
    """四舍五入到整数（0.5 向上），避免 Python round 的银行家舍入"""
    return int(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def compute_coins(price_inr: int, rate: int, config: PricingConfig = DEFAULT_PRICING) -> int:
    """
    计算积分包可得积分

    Args:
        price_inr: 价格（正整数卢比）
        rate: 兑换比例（调用方已校验 0 < rate <= 1000）
        config: 定价规则

    Returns:
        积分数
    """
    base = round_half_up(price_inr * rate)
    bonus = 0 if price_inr == config.first_pack_price else config.bonus_coins
    return base + bonus


def normalize_rate(value: Any, config: PricingConfig = DEFAULT_PRICING) -> int | None:
    """
    校验并取整管理员提交的兑换比例

    要求 0 < value <= max_rate，取整后仍须至少为 1。

    Returns:
        取整后的比例；不合法时返回 None
    """
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number) or number <= 0 or number > config.max_rate:
        return None
    try:
        rate = round_half_up(number)
    except InvalidOperation:
        return None
    return rate if rate >= 1 else None
