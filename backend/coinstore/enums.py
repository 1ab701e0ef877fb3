"""
枚举类型定义模块

所有枚举都继承自 str 和 Enum，这样既可以用作字符串（直接入库、直接序列化），
又具有枚举的特性。
"""
from enum import Enum


class OrderStatus(str, Enum):
    """
    订单状态枚举

    - CREATED: 已创建（保留状态，下单流程不会产生）
    - PENDING_VERIFICATION: 待核验（用户已下单，等待管理员确认 UPI 付款）
    - PAID: 已支付（首次进入时触发到账、游戏内发放、发票邮件）
    - REJECTED: 已驳回

    管理员可以在任意两个状态之间切换，不强制流转图。
    """
    CREATED = "CREATED"
    PENDING_VERIFICATION = "PENDING_VERIFICATION"
    PAID = "PAID"
    REJECTED = "REJECTED"

    @classmethod
    def parse(cls, value: str | None) -> "OrderStatus | None":
        """把外部传入的字符串（去除首尾空白）转换为枚举，非法值返回 None"""
        try:
            return cls((value or "").strip())
        except ValueError:
            return None


class PaymentMethod(str, Enum):
    """支付方式（目前只有手动 UPI 转账）"""
    UPI_GPAY = "UPI_GPAY"


class FulfillmentReason(str, Enum):
    """
    游戏内发放失败原因

    - NOT_CONFIGURED: 未配置 RCON（部署时主动关闭，不是错误）
    - NO_PLAYER: 用户没有填写游戏内用户名
    - RCON_ERROR: 连接、认证、超时或协议错误
    """
    NOT_CONFIGURED = "RCON_NOT_CONFIGURED"
    NO_PLAYER = "NO_PLAYER"
    RCON_ERROR = "RCON_ERROR"


class CoinTransactionType(str, Enum):
    """余额流水类型"""
    purchase = "purchase"
