from .audit import AuditLog
from .credit_redemption import CreditRedemption
from .error_log import ErrorLog
from .gift_order import (
    TERMINAL_STATUSES,
    DeliveryChannel,
    GiftOrder,
    GiftOrderStatus,
    GiftType,
)
from .merchant import Category, GiftProduct, Merchant
from .merchant_user import MerchantRole, MerchantUser
from .security_log import SecurityLog

__all__ = [
    "AuditLog",
    "Category",
    "CreditRedemption",
    "DeliveryChannel",
    "ErrorLog",
    "GiftOrder",
    "GiftOrderStatus",
    "GiftProduct",
    "GiftType",
    "Merchant",
    "MerchantRole",
    "MerchantUser",
    "SecurityLog",
    "TERMINAL_STATUSES",
]
