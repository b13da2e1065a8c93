"""
Domain hata hiyerarşisi.

Her sınıf sabit bir ``kind`` (API yanıtındaki ``code`` alanı) ve HTTP durum kodu taşır.
Router'lar bu hataları yakalamaz; app/main.py'deki exception handler JSON'a çevirir.
"""


class GiftError(Exception):
    kind = "GiftError"
    status_code = 400
    default_message = "Request could not be processed."

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


# --- Sipariş oluşturma (düzeltilebilir kullanıcı hataları) ---


class OrderValidationError(GiftError):
    kind = "OrderValidationError"


class MerchantNotFound(OrderValidationError):
    kind = "MerchantNotFound"
    status_code = 404
    default_message = "Merchant not found"


class CreditDisabled(OrderValidationError):
    kind = "CreditDisabled"
    default_message = "Store credit is not enabled for this merchant"


class InvalidAmount(OrderValidationError):
    kind = "InvalidAmount"
    default_message = "Amount must be positive"


class AmountOutOfRange(OrderValidationError):
    kind = "AmountOutOfRange"
    default_message = "Credit amount is outside the allowed range"


class ProductRequired(OrderValidationError):
    kind = "ProductRequired"
    default_message = "Product ID required for ITEM gifts"


class ProductNotFound(OrderValidationError):
    kind = "ProductNotFound"
    status_code = 404
    default_message = "Product not found"


class ProductMerchantMismatch(OrderValidationError):
    kind = "ProductMerchantMismatch"
    default_message = "Product does not belong to this merchant"


class PaymentFailed(GiftError):
    kind = "PaymentFailed"
    status_code = 402
    default_message = "Payment was not completed"


# --- Redemption (bu deneme için kesin; aynı girdiyle tekrar denenmez) ---


class RedemptionError(GiftError):
    kind = "RedemptionError"
    status_code = 409


class NotFound(RedemptionError):
    kind = "NotFound"
    status_code = 404
    default_message = "Gift not found"


class WrongGiftType(RedemptionError):
    kind = "WrongGiftType"
    status_code = 400
    default_message = "Gift type does not support this redemption"


class AlreadyFinalized(RedemptionError):
    kind = "AlreadyFinalized"
    default_message = "Gift is already redeemed or canceled"


class Expired(RedemptionError):
    kind = "Expired"
    status_code = 410
    default_message = "Gift has expired"


class InvalidDeduction(RedemptionError, InvalidAmount):
    # Redemption sırasında InvalidAmount; except InvalidAmount ikisini de yakalar
    kind = "InvalidAmount"
    status_code = 400
    default_message = "Amount to deduct must be positive"


class NoBalance(RedemptionError):
    kind = "NoBalance"
    default_message = "No credit balance remaining"


class InsufficientBalance(RedemptionError):
    kind = "InsufficientBalance"
    default_message = "Amount exceeds remaining balance"


class InvalidTransition(RedemptionError):
    kind = "InvalidTransition"
    default_message = "Status transition not allowed"


# --- Depolama ---


class DuplicateKey(GiftError):
    """Insert sırasında id / token / redeem code çakışması. Kullanıcıya asla dönmez."""

    kind = "DuplicateKey"
    status_code = 500
    default_message = "Duplicate key"

    def __init__(self, field: str, message: str | None = None):
        self.field = field
        super().__init__(message or f"Duplicate {field}")


class ConcurrentUpdate(GiftError):
    """Sipariş tekrar tekrar başka bir yazıcı tarafından değiştirildi; istemci yeniden deneyebilir."""

    kind = "ConcurrentUpdate"
    status_code = 409
    default_message = "Gift is being updated, please retry"


class RedeemCodeSpaceExhausted(RuntimeError):
    """Yeniden denemelere rağmen benzersiz redeem code üretilemedi: yapılandırma hatası."""
