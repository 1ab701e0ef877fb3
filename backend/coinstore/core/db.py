"""
数据库连接模块

管理数据库引擎，并提供种子数据（商品包 + 兑换比例）的初始化。

重要提示：
- 数据库表结构通过 Alembic 迁移管理，不要在这里创建表
- 确保在使用前导入所有模型（coinstore.models），否则关系可能无法正确初始化
"""
import logging

from sqlmodel import Session, create_engine, select

from coinstore import crud
from coinstore.core.config import settings
from coinstore.models import Product

logger = logging.getLogger(__name__)

# 创建数据库引擎（连接池）
engine = create_engine(str(settings.SQLALCHEMY_DATABASE_URI))

# 商品包种子数据，coins 为上线时的人工定价
SEED_PACKS: list[dict[str, object]] = [
    {"sku": "NAMO-45", "name": "NamoCoins Pack 45", "price_inr": 45, "coins": 79},
    {"sku": "NAMO-99", "name": "NamoCoins Pack 99", "price_inr": 99, "coins": 174},
    {"sku": "NAMO-149", "name": "NamoCoins Pack 149", "price_inr": 149, "coins": 261},
    {"sku": "NAMO-249", "name": "NamoCoins Pack 249", "price_inr": 249, "coins": 436},
    {"sku": "NAMO-399", "name": "NamoCoins Pack 399", "price_inr": 399, "coins": 699},
    {"sku": "NAMO-599", "name": "NamoCoins Pack 599", "price_inr": 599, "coins": 1049},
    {"sku": "NAMO-999", "name": "NamoCoins Pack 999", "price_inr": 999, "coins": 1749},
    {"sku": "NAMO-1499", "name": "NamoCoins Pack 1499", "price_inr": 1499, "coins": 2624},
]


def init_db(session: Session) -> None:
    """
    写入种子数据

    按 SKU upsert 商品包（已存在则覆盖名称、价格、积分），
    并确保兑换比例配置存在。

    Args:
        session: 数据库会话
    """
    for pack in SEED_PACKS:
        product = session.exec(select(Product).where(Product.sku == pack["sku"])).first()
        if product is None:
            product = Product(**pack)
        else:
            product.sqlmodel_update(pack)
        session.add(product)
    session.commit()

    rate = crud.get_coin_rate(session=session)
    logger.info(f"Seeded {len(SEED_PACKS)} packs, conversion rate is {rate}")
