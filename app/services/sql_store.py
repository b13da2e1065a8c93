"""
SQLModel tabanlı Order Store ve Redemption Ledger.

``mutate`` satırı okur (destekleyen veritabanında SELECT ... FOR UPDATE ile kilitler),
geçişi bir kopya üzerinde uygular ve yalnızca ``version`` okunduğu gibiyse yazar
(UPDATE ... WHERE id = :id AND version = :seen). SQLite satır kilidi vermez; başka bir
süreç araya girdiyse yazım 0 satır etkiler, transaction geri alınır ve geçiş taze durum
üzerinde yeniden uygulanır. Süreç içi anahtar kilidi aynı süreçteki çağrıları sıralar.
Bu sırada yapılan ledger eklemeleri aynı oturumu kullanır: geçiş reddedilirse ya da
commit başarısız olursa ne sipariş değişikliği ne de ledger satırı kalır.
"""
import logging
from contextvars import ContextVar

from sqlalchemy import func, or_, update
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from app.core.errors import ConcurrentUpdate, DuplicateKey, NotFound
from app.models import CreditRedemption, GiftOrder

from .codes import normalize_redeem_code
from .ledger import RedemptionLedger
from .order_store import KeyedLocks, Mutation, OrderStore, clone

log = logging.getLogger("giftlink.store")

# Başka süreçlerle yarışta aynı geçişi en fazla bu kadar yeniden uygula
MAX_MUTATE_ATTEMPTS = 10

_current_session: ContextVar[Session | None] = ContextVar("giftlink_mutation_session", default=None)


class SqlOrderStore(OrderStore):
    def __init__(self, engine: Engine) -> None:
        self._engine = engine
        self._locks = KeyedLocks()

    def insert(self, order: GiftOrder) -> GiftOrder:
        stored = clone(order)
        stored.redeem_code = normalize_redeem_code(stored.redeem_code)
        with Session(self._engine, expire_on_commit=False) as session:
            clash = session.exec(
                select(GiftOrder).where(
                    or_(
                        GiftOrder.id == stored.id,
                        GiftOrder.redeem_code == stored.redeem_code,
                        GiftOrder.gift_token == stored.gift_token,
                    )
                )
            ).first()
            if clash is not None:
                if clash.id == stored.id:
                    raise DuplicateKey("id")
                if clash.redeem_code == stored.redeem_code:
                    raise DuplicateKey("redeem_code")
                raise DuplicateKey("gift_token")
            session.add(stored)
            try:
                session.commit()
            except IntegrityError as e:
                # Eşzamanlı insert kontrolü geçti ama unique indekse takıldı
                session.rollback()
                raise DuplicateKey("key", str(e.orig)) from e
        return stored

    def get_by_id(self, order_id: str) -> GiftOrder | None:
        with Session(self._engine) as session:
            return session.get(GiftOrder, order_id)

    def get_by_redeem_code(self, code: str) -> GiftOrder | None:
        with Session(self._engine) as session:
            stmt = select(GiftOrder).where(GiftOrder.redeem_code == normalize_redeem_code(code))
            return session.exec(stmt).first()

    def list_by_merchant(self, merchant_id: str) -> list[GiftOrder]:
        with Session(self._engine) as session:
            stmt = (
                select(GiftOrder)
                .where(GiftOrder.merchant_id == merchant_id)
                .order_by(GiftOrder.created_at.desc())
            )
            return list(session.exec(stmt).all())

    def mutate(self, order_id: str, fn: Mutation) -> GiftOrder:
        with self._locks.hold(order_id):
            for attempt in range(1, MAX_MUTATE_ATTEMPTS + 1):
                order = self._mutate_once(order_id, fn)
                if order is not None:
                    return order
                log.warning(
                    "Order %s changed by another writer (attempt %d/%d), re-applying",
                    order_id,
                    attempt,
                    MAX_MUTATE_ATTEMPTS,
                )
        raise ConcurrentUpdate()

    def _mutate_once(self, order_id: str, fn: Mutation) -> GiftOrder | None:
        """Okunan ``version`` değişmediyse yazar; başka yazıcı araya girdiyse None (hiçbir şey kalmaz)."""
        with Session(self._engine, expire_on_commit=False) as session:
            token = _current_session.set(session)
            try:
                stmt = select(GiftOrder).where(GiftOrder.id == order_id).with_for_update()
                current = session.exec(stmt).first()
                if current is None:
                    raise NotFound()
                seen = current.version
                working = clone(current)
                session.expunge(current)
                fn(working)
                result = session.connection().execute(
                    update(GiftOrder)
                    .where(GiftOrder.id == order_id, GiftOrder.version == seen)
                    .values(**working.model_dump(exclude={"id", "version"}), version=seen + 1)
                )
                if result.rowcount != 1:
                    session.rollback()
                    return None
                session.commit()
            except Exception:
                session.rollback()
                raise
            finally:
                _current_session.reset(token)
        working.version = seen + 1
        return working


class SqlRedemptionLedger(RedemptionLedger):
    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    def append(self, order_id: str, entry: CreditRedemption) -> CreditRedemption:
        session = _current_session.get()
        if session is not None:
            # SqlOrderStore.mutate içinde: aynı transaction, commit (ya da CAS kaybında rollback) orada
            self._stage(session, order_id, entry)
            return entry
        with Session(self._engine, expire_on_commit=False) as own:
            self._stage(own, order_id, entry)
            own.commit()
        return entry

    def _stage(self, session: Session, order_id: str, entry: CreditRedemption) -> None:
        count = session.exec(
            select(func.count()).select_from(CreditRedemption).where(CreditRedemption.order_id == order_id)
        ).one()
        entry.order_id = order_id
        entry.seq = count + 1
        session.add(entry)

    def list_for_order(self, order_id: str) -> list[CreditRedemption]:
        with Session(self._engine) as session:
            stmt = (
                select(CreditRedemption)
                .where(CreditRedemption.order_id == order_id)
                .order_by(CreditRedemption.seq)
            )
            return list(session.exec(stmt).all())
