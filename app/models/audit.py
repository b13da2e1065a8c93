from datetime import datetime

from sqlmodel import Field, SQLModel

from app.core.clock import utcnow
from app.core.database import UTCDateTime


class AuditLog(SQLModel, table=True):
    id: int | None = Field(default=None, primary_key=True)
    event: str = Field(index=True)  # merchant_login, redeem_item, redeem_credit
    merchant_user_id: str | None = Field(default=None, index=True)
    order_id: str | None = Field(default=None, index=True)
    ip: str | None = None
    detail: str | None = None
    created_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime)
