"""Store credit düşüm kaydı: yalnızca eklenir, düzenlenmez/silinmez."""
from datetime import datetime

from sqlalchemy import UniqueConstraint
from sqlmodel import Field, SQLModel

from app.core.database import UTCDateTime


class CreditRedemption(SQLModel, table=True):
    __tablename__ = "credit_redemptions"
    __table_args__ = (UniqueConstraint("order_id", "seq"),)
    id: str = Field(primary_key=True, max_length=64)
    order_id: str = Field(foreign_key="gift_orders.id", index=True)
    seq: int = 0  # sipariş içindeki sıra (1'den başlar), ledger append atar
    amount_deducted: int
    deducted_at: datetime = Field(index=True, sa_type=UTCDateTime)
    merchant_user_id: str
    notes: str | None = None
