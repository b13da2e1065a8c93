"""Hediye siparişi: oluşturma → (kısmi) redeem → son durum. Silinmez, denetim için saklanır."""
from datetime import datetime
from decimal import Decimal
from enum import Enum

from sqlmodel import Field, SQLModel

from app.core.clock import as_utc
from app.core.database import UTCDateTime


class GiftType(str, Enum):
    ITEM = "ITEM"
    CREDIT = "CREDIT"


class GiftOrderStatus(str, Enum):
    CREATED = "CREATED"
    PAID = "PAID"
    SENT = "SENT"
    REDEEMED = "REDEEMED"
    CANCELED = "CANCELED"
    EXPIRED = "EXPIRED"


TERMINAL_STATUSES = frozenset(
    {GiftOrderStatus.REDEEMED, GiftOrderStatus.CANCELED, GiftOrderStatus.EXPIRED}
)


class DeliveryChannel(str, Enum):
    WHATSAPP = "whatsapp"
    SMS = "sms"
    EMAIL = "email"


class GiftOrder(SQLModel, table=True):
    __tablename__ = "gift_orders"
    id: str = Field(primary_key=True, max_length=64)
    gift_type: GiftType = GiftType.ITEM
    merchant_id: str = Field(index=True)
    product_id: str | None = None  # sadece ITEM
    amount: Decimal = Field(max_digits=14, decimal_places=2)
    currency: str = Field(max_length=8)
    credit_amount: int | None = None  # sadece CREDIT, değişmez
    credit_remaining: int | None = None  # sadece CREDIT, yalnızca azalır
    status: GiftOrderStatus = GiftOrderStatus.CREATED
    gift_token: str = Field(unique=True, index=True)
    redeem_code: str = Field(unique=True, index=True, max_length=16)
    # Sunum alanları: çekirdek için opak
    sender_name: str
    receiver_name: str
    receiver_contact: str
    delivery_channel: DeliveryChannel
    message: str = ""
    theme_id: str = "celebration"
    created_at: datetime = Field(sa_type=UTCDateTime)
    scheduled_send_at: datetime | None = Field(default=None, sa_type=UTCDateTime)
    sent_at: datetime | None = Field(default=None, sa_type=UTCDateTime)
    redeemed_at: datetime | None = Field(default=None, sa_type=UTCDateTime)
    redeemed_by_merchant_user_id: str | None = None
    expires_at: datetime = Field(index=True, sa_type=UTCDateTime)
    # Her başarılı mutate ile artar; SQL store karşılaştırmalı yazım (CAS) için kullanır
    version: int = 1

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    def is_expired_at(self, now: datetime) -> bool:
        return self.status == GiftOrderStatus.EXPIRED or as_utc(now) > as_utc(self.expires_at)
