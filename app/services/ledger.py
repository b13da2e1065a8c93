"""Redemption Ledger: sipariş başına yalnızca eklenen credit düşüm kayıtları."""
import threading
from abc import ABC, abstractmethod

from app.models import CreditRedemption

from .order_store import clone, defer_until_commit


class RedemptionLedger(ABC):
    @abstractmethod
    def append(self, order_id: str, entry: CreditRedemption) -> CreditRedemption: ...

    @abstractmethod
    def list_for_order(self, order_id: str) -> list[CreditRedemption]:
        """Ekleme sırasıyla."""

    def total_deducted(self, order_id: str) -> int:
        return sum(e.amount_deducted for e in self.list_for_order(order_id))


class InMemoryRedemptionLedger(RedemptionLedger):
    def __init__(self) -> None:
        self._entries: dict[str, list[CreditRedemption]] = {}
        self._lock = threading.Lock()

    def append(self, order_id: str, entry: CreditRedemption) -> CreditRedemption:
        entry.order_id = order_id
        # mutate içinde: kayıt yeni bakiye yazıldıktan sonra görünür olur
        if not defer_until_commit(lambda: self._publish(order_id, entry)):
            self._publish(order_id, entry)
        return entry

    def _publish(self, order_id: str, entry: CreditRedemption) -> None:
        with self._lock:
            entries = self._entries.setdefault(order_id, [])
            entry.seq = len(entries) + 1
            entries.append(clone(entry))

    def list_for_order(self, order_id: str) -> list[CreditRedemption]:
        with self._lock:
            return [clone(e) for e in self._entries.get(order_id, [])]
