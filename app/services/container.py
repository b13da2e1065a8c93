"""Servislerin açık kurulumu: lifespan'de bir kez oluşturulup app.state'e konur."""
from dataclasses import dataclass

from sqlalchemy.engine import Engine

from app.core.clock import Clock, utcnow
from app.core.config import Settings

from .catalog import SqlCatalog
from .ledger import InMemoryRedemptionLedger, RedemptionLedger
from .order_factory import OrderFactory
from .order_store import InMemoryOrderStore, OrderStore
from .payment import MockPaymentProvider, PaymentProvider
from .redemption import RedemptionService
from .sql_store import SqlOrderStore, SqlRedemptionLedger


@dataclass
class GiftServices:
    catalog: SqlCatalog
    store: OrderStore
    ledger: RedemptionLedger
    factory: OrderFactory
    redemption: RedemptionService
    payments: PaymentProvider


def build_services(
    settings: Settings,
    engine: Engine,
    clock: Clock = utcnow,
    payments: PaymentProvider | None = None,
) -> GiftServices:
    if settings.storage_backend == "memory":
        store: OrderStore = InMemoryOrderStore()
        ledger: RedemptionLedger = InMemoryRedemptionLedger()
    else:
        store = SqlOrderStore(engine)
        ledger = SqlRedemptionLedger(engine)
    catalog = SqlCatalog(engine)
    factory = OrderFactory(
        store,
        catalog.get_merchant,
        catalog.get_product,
        clock,
        expiry_days=settings.gift_expiry_days,
        credit_currency=settings.credit_currency,
        default_theme_id=settings.default_theme_id,
        max_code_attempts=settings.redeem_code_max_attempts,
    )
    return GiftServices(
        catalog=catalog,
        store=store,
        ledger=ledger,
        factory=factory,
        redemption=RedemptionService(store, ledger, clock),
        payments=payments or MockPaymentProvider(),
    )
