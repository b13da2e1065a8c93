"""
Order Store: siparişlerin tek yetkili koleksiyonu.

Birincil anahtar ``id``; ``gift_token`` ve ``redeem_code`` ikincil benzersiz indeksler.
Tek değiştirme yolu ``mutate``: aynı sipariş için çağrılar sıraya girer, geçiş fonksiyonu
hata fırlatırsa hiçbir değişiklik görünmez.
"""
import hmac
import threading
from abc import ABC, abstractmethod
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Callable, Iterator, TypeVar

from sqlmodel import SQLModel

from app.core.errors import DuplicateKey, NotFound
from app.models import GiftOrder

from .codes import normalize_redeem_code

M = TypeVar("M", bound=SQLModel)

# Geçiş fonksiyonu: çalışma kopyasını yerinde değiştirir ya da RedemptionError fırlatır
Mutation = Callable[[GiftOrder], None]

# mutate sırasında ertelenen yayınlar (ledger kayıtları); sipariş yazılınca çalışır
_pending_publish: ContextVar[list[Callable[[], None]] | None] = ContextVar(
    "giftlink_pending_publish", default=None
)


def clone(model: M) -> M:
    """Tablo modelinin bağımsız kopyası (oturuma bağlı değil)."""
    return type(model).model_validate(model.model_dump())


def tokens_match(expected: str, provided: str) -> bool:
    """Timing-safe karşılaştırma; ASCII olmayan girdi TypeError vermesin diye bytes."""
    return hmac.compare_digest((expected or "").encode("utf-8"), (provided or "").encode("utf-8"))


class KeyedLocks:
    """Anahtar başına kilit: farklı siparişler birbirini beklemez. Bekleyen kalmayınca kilit silinir."""

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: dict[str, list] = {}  # key -> [Lock, tutan + bekleyen sayısı]

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)

    @contextmanager
    def hold(self, key: str) -> Iterator[None]:
        with self._guard:
            slot = self._locks.get(key)
            if slot is None:
                slot = self._locks[key] = [threading.Lock(), 0]
            slot[1] += 1
        try:
            with slot[0]:
                yield
        finally:
            with self._guard:
                slot[1] -= 1
                if slot[1] == 0:
                    del self._locks[key]


def defer_until_commit(callback: Callable[[], None]) -> bool:
    """
    InMemoryOrderStore.mutate içindeysek callback sipariş yazıldıktan sonra çalışır
    (geçiş hata verirse hiç çalışmaz) ve True döner. Dışarıdaysak False.
    """
    pending = _pending_publish.get()
    if pending is None:
        return False
    pending.append(callback)
    return True


class OrderStore(ABC):
    @abstractmethod
    def insert(self, order: GiftOrder) -> GiftOrder: ...

    @abstractmethod
    def get_by_id(self, order_id: str) -> GiftOrder | None: ...

    @abstractmethod
    def get_by_redeem_code(self, code: str) -> GiftOrder | None: ...

    @abstractmethod
    def list_by_merchant(self, merchant_id: str) -> list[GiftOrder]: ...

    @abstractmethod
    def mutate(self, order_id: str, fn: Mutation) -> GiftOrder: ...

    def get_by_token(self, order_id: str, token: str) -> GiftOrder | None:
        """Token eşleşmezse None: yanlış token ile olmayan id ayırt edilemez."""
        order = self.get_by_id(order_id)
        if order is None or not tokens_match(order.gift_token, token):
            return None
        return order


class InMemoryOrderStore(OrderStore):
    def __init__(self) -> None:
        self._orders: dict[str, GiftOrder] = {}
        self._by_code: dict[str, str] = {}
        self._by_token: dict[str, str] = {}
        self._insert_lock = threading.Lock()
        self._locks = KeyedLocks()

    def insert(self, order: GiftOrder) -> GiftOrder:
        stored = clone(order)
        stored.redeem_code = normalize_redeem_code(stored.redeem_code)
        with self._insert_lock:
            if stored.id in self._orders:
                raise DuplicateKey("id")
            if stored.redeem_code in self._by_code:
                raise DuplicateKey("redeem_code")
            if stored.gift_token in self._by_token:
                raise DuplicateKey("gift_token")
            self._orders[stored.id] = stored
            self._by_code[stored.redeem_code] = stored.id
            self._by_token[stored.gift_token] = stored.id
        return clone(stored)

    def get_by_id(self, order_id: str) -> GiftOrder | None:
        order = self._orders.get(order_id)
        return clone(order) if order is not None else None

    def get_by_redeem_code(self, code: str) -> GiftOrder | None:
        order_id = self._by_code.get(normalize_redeem_code(code))
        return self.get_by_id(order_id) if order_id else None

    def list_by_merchant(self, merchant_id: str) -> list[GiftOrder]:
        rows = [clone(o) for o in list(self._orders.values()) if o.merchant_id == merchant_id]
        return sorted(rows, key=lambda o: o.created_at, reverse=True)

    def mutate(self, order_id: str, fn: Mutation) -> GiftOrder:
        with self._locks.hold(order_id):
            current = self._orders.get(order_id)
            if current is None:
                raise NotFound()
            working = clone(current)
            pending: list[Callable[[], None]] = []
            token = _pending_publish.set(pending)
            try:
                fn(working)
            finally:
                _pending_publish.reset(token)
            working.version = current.version + 1
            # id ve indeksli alanlar değişmez; yalnızca kaydı değiştir
            self._orders[order_id] = working
            for publish in pending:
                publish()
            return clone(working)
