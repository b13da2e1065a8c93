from datetime import datetime, timezone
from typing import Callable

# Servislere enjekte edilen saat: her zaman tz bilgili UTC döner
Clock = Callable[[], datetime]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Naive değer UTC kabul edilir (eski kayıtlar, tz saklamayan sürücüler)."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
