"""
商品与兑换比例管理

- update_rate: 修改全局兑换比例，可选地按新比例重算所有上架商品的积分
- recalc_product: 按当前比例重算单个商品的积分
- update_product: 手工编辑商品

非法输入一律不修改任何数据，返回 None，由路由层转换为错误响应。
已有订单的积分是下单时的快照，不受这里的修改影响。
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any

from sqlmodel import Session

from coinstore import crud
from coinstore.models import Product, utc_now
from coinstore.services.caller import Caller, require_admin
from coinstore.services.pricing import (
    DEFAULT_PRICING,
    PricingConfig,
    compute_coins,
    normalize_rate,
    round_half_up,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RateUpdate:
    rate: int
    repriced: int = 0  # 重算了多少个商品


class CatalogService:
    def __init__(self, *, session: Session, pricing: PricingConfig = DEFAULT_PRICING) -> None:
        self.session = session
        self.pricing = pricing

    def current_rate(self) -> int:
        return crud.get_coin_rate(session=self.session, default=self.pricing.default_rate)

    def update_rate(self, caller: Caller, rate: Any, *, recalc: bool = False) -> RateUpdate | None:
        """
        修改兑换比例

        比例与批量重算在同一个事务里提交：要么全部生效，要么全部不生效。

        Args:
            caller: 调用者（必须是管理员）
            rate: 新比例，要求 0 < rate <= 1000，四舍五入取整
            recalc: 是否重算所有上架商品的积分

        Returns:
            RateUpdate；比例不合法时返回 None
        """
        require_admin(caller)
        new_rate = normalize_rate(rate, self.pricing)
        if new_rate is None:
            logger.info(f"Rejected conversion rate {rate!r}")
            return None

        repriced = 0
        try:
            crud.set_coin_rate(session=self.session, rate=new_rate)
            if recalc:
                now = utc_now()
                for product in crud.list_active_products_for_update(session=self.session):
                    product.coins = compute_coins(product.price_inr, new_rate, self.pricing)
                    product.updated_at = now
                    self.session.add(product)
                    repriced += 1
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise

        logger.info(f"Conversion rate set to {new_rate}, repriced {repriced} products")
        return RateUpdate(rate=new_rate, repriced=repriced)

    def recalc_product(self, caller: Caller, product_id: int) -> Product | None:
        """
        按当前兑换比例重算单个商品积分

        存储的比例同样要求 0 < rate <= 1000。
        商品不存在或比例越界时返回 None，不做修改。
        """
        require_admin(caller)
        rate = normalize_rate(self.current_rate(), self.pricing)
        if rate is None:
            logger.warning("Stored conversion rate out of range, skipping product recalc")
            return None
        product = crud.get_product(session=self.session, product_id=product_id)
        if product is None:
            return None
        product.coins = compute_coins(product.price_inr, rate, self.pricing)
        product.updated_at = utc_now()
        self.session.add(product)
        self.session.commit()
        self.session.refresh(product)
        return product

    def update_product(
        self,
        caller: Caller,
        product_id: int,
        *,
        name: str,
        price_inr: Any,
        coins: Any,
        active: bool,
        best_seller: bool,
    ) -> Product | None:
        """
        手工编辑商品

        名称不能为空，价格必须大于 0，积分不能为负；数值四舍五入取整。
        校验失败或商品不存在时返回 None。
        """
        require_admin(caller)
        name = (name or "").strip()
        price = _to_int(price_inr)
        coin_count = _to_int(coins)
        if not name or price is None or price <= 0 or coin_count is None or coin_count < 0:
            return None

        product = crud.get_product(session=self.session, product_id=product_id)
        if product is None:
            return None
        product.name = name
        product.price_inr = price
        product.coins = coin_count
        product.active = active
        product.best_seller = best_seller
        product.updated_at = utc_now()
        self.session.add(product)
        self.session.commit()
        self.session.refresh(product)
        return product


def _to_int(value: Any) -> int | None:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number):
        return None
    return round_half_up(number)
