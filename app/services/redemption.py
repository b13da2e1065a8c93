"""
Redemption state machine.

ITEM hediyeler tek seferlik (redeem edildi / edilmedi). CREDIT hediyeler açık hesap gibi:
farklı personel zaman içinde bakiyeden düşer, her düşüm ledger'a yazılır; bakiye tam
sıfıra inince sipariş kendiliğinden REDEEMED olur.

Her değişiklik ``OrderStore.mutate`` içinde taze durum üzerinde yeniden doğrulanır:
aynı koda eşzamanlı iki istekte yalnızca biri kazanır, diğeri AlreadyFinalized /
InsufficientBalance alır.
"""
import logging

from app.core.clock import Clock, utcnow
from app.core.errors import (
    AlreadyFinalized,
    Expired,
    GiftError,
    InsufficientBalance,
    InvalidDeduction,
    InvalidTransition,
    NoBalance,
    NotFound,
    WrongGiftType,
)
from app.models import CreditRedemption, GiftOrder, GiftOrderStatus, GiftType

from .codes import new_order_id, normalize_redeem_code
from .ledger import RedemptionLedger
from .order_store import OrderStore

log = logging.getLogger("giftlink.redemption")

S = GiftOrderStatus

# Dış aktörlerin (teslimat, iptal, süre dolumu) tetiklediği geçişler.
# REDEEMED yalnızca redeem_item / redeem_credit ile verilir.
ALLOWED_TRANSITIONS: dict[GiftOrderStatus, frozenset[GiftOrderStatus]] = {
    S.CREATED: frozenset({S.PAID, S.CANCELED, S.EXPIRED}),
    S.PAID: frozenset({S.SENT, S.REDEEMED, S.CANCELED, S.EXPIRED}),
    S.SENT: frozenset({S.REDEEMED, S.CANCELED, S.EXPIRED}),
    S.REDEEMED: frozenset(),
    S.CANCELED: frozenset(),
    S.EXPIRED: frozenset(),
}


class RedemptionService:
    def __init__(self, store: OrderStore, ledger: RedemptionLedger, clock: Clock = utcnow) -> None:
        self._store = store
        self._ledger = ledger
        self._clock = clock

    # --- okuma ---

    def find_for_merchant(self, code: str, merchant_id: str | None) -> GiftOrder:
        """Başka merchant'ın kodu NotFound döner (Forbidden değil): kodun varlığı sızmaz."""
        order = self._store.get_by_redeem_code(normalize_redeem_code(code))
        if order is None or (merchant_id is not None and order.merchant_id != merchant_id):
            raise NotFound()
        return order

    def lookup(self, code: str, merchant_id: str) -> tuple[GiftOrder, list[CreditRedemption]]:
        order = self.find_for_merchant(code, merchant_id)
        return order, self._ledger.list_for_order(order.id)

    def order_detail(self, order_id: str, merchant_id: str) -> tuple[GiftOrder, list[CreditRedemption]]:
        order = self._store.get_by_id(order_id)
        if order is None or order.merchant_id != merchant_id:
            raise NotFound()
        return order, self._ledger.list_for_order(order.id)

    def history(self, merchant_id: str) -> list[GiftOrder]:
        return self._store.list_by_merchant(merchant_id)

    # --- redeem ---

    def _ensure_redeemable(self, order: GiftOrder, gift_type: GiftType) -> None:
        if order.gift_type != gift_type:
            raise WrongGiftType()
        if order.status in (S.REDEEMED, S.CANCELED):
            raise AlreadyFinalized()
        if order.is_expired_at(self._clock()):
            raise Expired()

    def _finalize(self, order: GiftOrder, merchant_user_id: str) -> None:
        order.status = S.REDEEMED
        order.redeemed_at = self._clock()
        order.redeemed_by_merchant_user_id = merchant_user_id

    def redeem_item(self, code: str, merchant_user_id: str, merchant_id: str | None = None) -> GiftOrder:
        try:
            found = self.find_for_merchant(code, merchant_id)

            def apply(order: GiftOrder) -> None:
                self._ensure_redeemable(order, GiftType.ITEM)
                self._finalize(order, merchant_user_id)

            order = self._store.mutate(found.id, apply)
        except GiftError as e:
            log.info("redeem_item rejected code=%s user=%s kind=%s", normalize_redeem_code(code), merchant_user_id, e.kind)
            raise
        log.info("redeem_item ok order=%s user=%s", order.id, merchant_user_id)
        return order

    def redeem_credit(
        self,
        code: str,
        amount_to_deduct: int,
        merchant_user_id: str,
        merchant_id: str | None = None,
        notes: str | None = None,
    ) -> tuple[GiftOrder, CreditRedemption]:
        staged: list[CreditRedemption] = []
        try:
            found = self.find_for_merchant(code, merchant_id)

            def apply(order: GiftOrder) -> None:
                self._ensure_redeemable(order, GiftType.CREDIT)
                if amount_to_deduct is None or amount_to_deduct <= 0:
                    raise InvalidDeduction()
                remaining = order.credit_remaining or 0
                if remaining <= 0:
                    raise NoBalance()
                if amount_to_deduct > remaining:
                    raise InsufficientBalance()
                now = self._clock()
                order.credit_remaining = remaining - amount_to_deduct
                if order.credit_remaining == 0:
                    self._finalize(order, merchant_user_id)
                # Son adım: buradan sonra geçiş başarısız olamaz
                entry = CreditRedemption(
                    id=new_order_id(),
                    order_id=order.id,
                    amount_deducted=amount_to_deduct,
                    deducted_at=now,
                    merchant_user_id=merchant_user_id,
                    notes=(notes or "").strip() or None,
                )
                staged.append(self._ledger.append(order.id, entry))

            order = self._store.mutate(found.id, apply)
        except GiftError as e:
            log.info(
                "redeem_credit rejected code=%s user=%s amount=%s kind=%s",
                normalize_redeem_code(code),
                merchant_user_id,
                amount_to_deduct,
                e.kind,
            )
            raise
        log.info(
            "redeem_credit ok order=%s user=%s deducted=%s remaining=%s status=%s",
            order.id,
            merchant_user_id,
            amount_to_deduct,
            order.credit_remaining,
            order.status.value,
        )
        # mutate yarışta geçişi yeniden uygulayabilir: geçerli kayıt sonuncusu
        return order, staged[-1]

    # --- dış aktör geçişleri ---

    def _transition(self, order_id: str, target: GiftOrderStatus) -> GiftOrder:
        def apply(order: GiftOrder) -> None:
            if order.is_terminal:
                raise AlreadyFinalized()
            if target not in ALLOWED_TRANSITIONS[order.status]:
                raise InvalidTransition(f"Cannot move {order.status.value} to {target.value}")
            order.status = target
            if target == S.SENT:
                order.sent_at = self._clock()

        order = self._store.mutate(order_id, apply)
        log.info("order %s -> %s", order_id, target.value)
        return order

    def mark_sent(self, order_id: str) -> GiftOrder:
        return self._transition(order_id, S.SENT)

    def cancel(self, order_id: str) -> GiftOrder:
        return self._transition(order_id, S.CANCELED)

    def expire(self, order_id: str) -> GiftOrder:
        return self._transition(order_id, S.EXPIRED)
