from enum import Enum

from sqlmodel import Field, SQLModel


class MerchantRole(str, Enum):
    OWNER = "owner"
    STAFF = "staff"


class MerchantUser(SQLModel, table=True):
    """Merchant personeli: portala giriş yapar, kod sorgular ve redeem eder."""

    __tablename__ = "merchant_users"
    id: str = Field(primary_key=True, max_length=64)
    merchant_id: str = Field(foreign_key="merchant.id", index=True)
    role: MerchantRole = MerchantRole.STAFF
    email: str = Field(unique=True, index=True)
    hashed_password: str
    is_active: bool = True
