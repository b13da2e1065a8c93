"""Güvenlik olayları: başarısız merchant girişi, rate limit."""
from datetime import datetime

from sqlmodel import Field, SQLModel

from app.core.clock import utcnow
from app.core.database import UTCDateTime


class SecurityLog(SQLModel, table=True):
    __tablename__ = "security_logs"
    id: int | None = Field(default=None, primary_key=True)
    event: str = Field(index=True)  # failed_login | rate_limit
    merchant_user_id: str | None = Field(default=None, index=True)
    ip: str | None = None
    endpoint: str | None = None
    detail: str | None = None
    created_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime)
