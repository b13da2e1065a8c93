"""Sipariş kimliği, erişim token'ı ve redeem code üretimi."""
import secrets
import uuid

# 0/O ve 1/I gibi karışan karakterler yok: 24 harf + 8 rakam = 32 sembol
REDEEM_CODE_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"
REDEEM_CODE_LENGTH = 6


def new_order_id() -> str:
    return str(uuid.uuid4())


def new_access_token() -> str:
    """Paylaşılan linkte taşınan bearer secret; tahmin edilemez olmalı (256 bit)."""
    return secrets.token_urlsafe(32)


def new_redeem_code() -> str:
    """Benzersizlik çağıranın sorumluluğunda: store insert DuplicateKey verirse yeniden üretilir."""
    return "".join(secrets.choice(REDEEM_CODE_ALPHABET) for _ in range(REDEEM_CODE_LENGTH))


def normalize_redeem_code(code: str) -> str:
    return (code or "").strip().upper()
