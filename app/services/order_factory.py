"""Sipariş oluşturma: merchant/ürün/credit kurallarını doğrular ve siparişi store'a yazar."""
import logging
from dataclasses import dataclass
from datetime import timedelta
from decimal import Decimal
from typing import Callable

from app.core.clock import Clock, as_utc, utcnow
from app.core.errors import (
    AmountOutOfRange,
    CreditDisabled,
    DuplicateKey,
    InvalidAmount,
    MerchantNotFound,
    ProductMerchantMismatch,
    ProductNotFound,
    ProductRequired,
    RedeemCodeSpaceExhausted,
)
from app.models import GiftOrder, GiftOrderStatus, GiftProduct, GiftType, Merchant
from app.schemas import CreateGiftOrderRequest

from .codes import new_access_token, new_order_id, new_redeem_code
from .order_store import OrderStore

log = logging.getLogger("giftlink.orders")

MerchantLookup = Callable[[str], Merchant | None]
ProductLookup = Callable[[str], GiftProduct | None]


@dataclass
class OrderTerms:
    amount: Decimal
    currency: str
    product_id: str | None = None
    credit_amount: int | None = None


def check_credit_amount(merchant: Merchant, credit_amount: int | None) -> int:
    """Merchant credit politikası: etkin mi, pozitif mi, [min, max] aralığında mı (0 = sınırsız)."""
    if not merchant.credit_is_enabled:
        raise CreditDisabled()
    if credit_amount is None or credit_amount <= 0:
        raise InvalidAmount("Credit amount must be positive")
    if merchant.credit_min_amount and credit_amount < merchant.credit_min_amount:
        raise AmountOutOfRange()
    if merchant.credit_max_amount and credit_amount > merchant.credit_max_amount:
        raise AmountOutOfRange()
    return credit_amount


class OrderFactory:
    def __init__(
        self,
        store: OrderStore,
        merchant_lookup: MerchantLookup,
        product_lookup: ProductLookup,
        clock: Clock = utcnow,
        *,
        expiry_days: int = 90,
        credit_currency: str = "LBP",
        default_theme_id: str = "celebration",
        max_code_attempts: int = 10,
        code_generator: Callable[[], str] = new_redeem_code,
    ) -> None:
        self._store = store
        self._merchant_lookup = merchant_lookup
        self._product_lookup = product_lookup
        self._clock = clock
        self._expiry = timedelta(days=expiry_days)
        self._credit_currency = credit_currency
        self._default_theme_id = default_theme_id
        self._max_code_attempts = max_code_attempts
        self._code_generator = code_generator

    def quote(self, data: CreateGiftOrderRequest) -> OrderTerms:
        """
        Siparişin tutarını ve para birimini belirler. Doğrulama sırası sabit,
        ilk ihlalde ilgili hata fırlatılır. Ödeme bu tutar üzerinden alınır.
        """
        merchant = self._merchant_lookup(data.merchant_id)
        if merchant is None:
            raise MerchantNotFound()

        if data.gift_type == GiftType.CREDIT:
            credit_amount = check_credit_amount(merchant, data.credit_amount)
            return OrderTerms(
                amount=Decimal(credit_amount),
                currency=self._credit_currency,
                credit_amount=credit_amount,
            )
        if not data.product_id:
            raise ProductRequired()
        product = self._product_lookup(data.product_id)
        if product is None:
            raise ProductNotFound()
        if product.merchant_id != data.merchant_id:
            raise ProductMerchantMismatch()
        return OrderTerms(amount=Decimal(product.price), currency=product.currency, product_id=product.id)

    def create_order(self, data: CreateGiftOrderRequest) -> GiftOrder:
        """Ödeme dış sağlayıcıda alınmış kabul edilir: sipariş doğrudan PAID başlar."""
        terms = self.quote(data)
        now = self._clock()
        for attempt in range(1, self._max_code_attempts + 1):
            order = GiftOrder(
                id=new_order_id(),
                gift_type=data.gift_type,
                merchant_id=data.merchant_id,
                product_id=terms.product_id,
                amount=terms.amount,
                currency=terms.currency,
                credit_amount=terms.credit_amount,
                credit_remaining=terms.credit_amount,
                status=GiftOrderStatus.PAID,
                gift_token=new_access_token(),
                redeem_code=self._code_generator(),
                sender_name=data.sender_name,
                receiver_name=data.receiver_name,
                receiver_contact=data.receiver_contact,
                delivery_channel=data.delivery_channel,
                message=data.message,
                theme_id=data.theme_id or self._default_theme_id,
                created_at=now,
                scheduled_send_at=as_utc(data.scheduled_send_at) if data.scheduled_send_at else None,
                sent_at=now,
                expires_at=now + self._expiry,
            )
            try:
                stored = self._store.insert(order)
            except DuplicateKey as e:
                log.warning(
                    "Order insert collision on %s (attempt %d/%d), regenerating",
                    e.field,
                    attempt,
                    self._max_code_attempts,
                )
                continue
            log.info(
                "Order created id=%s type=%s merchant=%s amount=%s %s",
                stored.id,
                stored.gift_type.value,
                stored.merchant_id,
                stored.amount,
                stored.currency,
            )
            return stored
        log.error("Redeem code generation exhausted after %d attempts", self._max_code_attempts)
        raise RedeemCodeSpaceExhausted(
            f"Could not allocate a unique redeem code after {self._max_code_attempts} attempts"
        )
