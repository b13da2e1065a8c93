from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings

# .env proje kökünde: app/core/config.py -> app/core -> app -> kök
_ROOT = Path(__file__).resolve().parent.parent.parent
_ENV_FILE = _ROOT / ".env"

STORAGE_BACKENDS = ("sql", "memory")


class Settings(BaseSettings):
    secret_key: str = "change-me-in-production"
    database_url: str = "sqlite:///./giftlink.db"
    # "sql": SQLModel tabloları, "memory": süreç içi sözlük (demo / test)
    storage_backend: str = "sql"
    # CORS: virgülle ayrılmış origin listesi
    cors_origins: str = "*"
    # IP başına dakikada max istek (rate limit)
    rate_limit_per_minute: int = 60
    # Merchant login için ayrı limit (testte yüksek tutulabilir)
    rate_limit_login_per_minute: int = 5
    environment: str = "development"
    # Paylaşılabilir hediye linkinin kök adresi (alıcı bu linkle hediyeyi açar)
    frontend_url: str = "http://127.0.0.1:8081"
    gift_expiry_days: int = 90
    credit_currency: str = "LBP"  # Store credit her zaman LBP
    default_theme_id: str = "celebration"
    # Redeem code çakışmasında yeniden deneme sayısı; 32^6 uzayda tükenmesi beklenmez
    redeem_code_max_attempts: int = 10
    merchant_token_expire_minutes: int = 60 * 12  # 12 saat (bir vardiya)
    seed_demo_data: bool = False

    model_config = {
        "env_file": _ENV_FILE if _ENV_FILE.is_file() else ".env",
        "extra": "ignore",
    }

    @field_validator("storage_backend", mode="before")
    @classmethod
    def normalize_backend(cls, v: str | None) -> str:
        v = (v or "sql").strip().lower()
        if v not in STORAGE_BACKENDS:
            raise ValueError(f"storage_backend must be one of {STORAGE_BACKENDS}")
        return v

    @field_validator("frontend_url", mode="before")
    @classmethod
    def strip_frontend_url(cls, v: str | None) -> str:
        return (v or "").strip().rstrip("/")


settings = Settings()
