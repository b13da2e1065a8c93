from sqlalchemy import DateTime, TypeDecorator, text
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from .clock import as_utc
from .config import settings


class UTCDateTime(TypeDecorator):
    """
    Zaman damgaları veritabanına UTC olarak yazılır ve tz bilgili UTC olarak okunur.
    SQLite tz saklamaz; okunan naive değer UTC kabul edilir.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return value
        return as_utc(value)

    def process_result_value(self, value, dialect):
        if value is None:
            return value
        return as_utc(value)


def _normalized_database_url(raw_url: str) -> str:
    """
    DATABASE_URL normalizasyonu:
    - postgres:// veya postgresql:// ise psycopg3 dialekti ile çalışacak şekilde dönüştür.
    - Diğer tüm durumlarda olduğu gibi bırak (SQLite vs.).
    """
    if not raw_url:
        return "sqlite:///./giftlink.db"
    raw_url = raw_url.strip()
    if raw_url.startswith("postgres://"):
        return "postgresql+psycopg://" + raw_url[len("postgres://") :]
    if raw_url.startswith("postgresql://") and "+psycopg" not in raw_url.split("://", 1)[0]:
        return "postgresql+psycopg://" + raw_url[len("postgresql://") :]
    return raw_url


def build_engine(url: str):
    # In-memory SQLite: tek bağlantı kullan ki init_db tabloları tüm isteklerde görünsün (testler için)
    connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
    use_static_pool = url.startswith("sqlite") and ":memory:" in url
    return create_engine(
        url,
        connect_args=connect_args,
        poolclass=StaticPool if use_static_pool else None,
    )


DATABASE_URL = _normalized_database_url(settings.database_url)
engine = build_engine(DATABASE_URL)


def get_db():
    with Session(engine) as session:
        yield session


def init_db(bind=None) -> None:
    # Tüm tablolar metadata'ya kayıtlı olsun
    import app.models  # noqa: F401

    SQLModel.metadata.create_all(bind or engine)


def ping_db() -> bool:
    """Health için: veritabanına basit bir sorgu atılabiliyor mu?"""
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return True
    except Exception:
        return False
