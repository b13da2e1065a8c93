"""Katalog: merchant ve hediye ürünleri. Çekirdek bu tabloları yalnızca okur."""
from decimal import Decimal
from enum import Enum

from sqlmodel import Field, SQLModel


class Category(str, Enum):
    COFFEE = "coffee"
    DESSERT = "dessert"
    MEALS = "meals"
    FLOWERS = "flowers"
    WELLNESS = "wellness"


class Merchant(SQLModel, table=True):
    id: str = Field(primary_key=True, max_length=64)
    name: str
    description: str = ""
    city: str = Field(default="", index=True)
    area: str = ""
    address: str = ""
    phone: str = ""
    hours: str = ""
    logo_url: str = ""
    cover_url: str = ""
    is_active: bool = True
    rating: float = 0.0
    review_count: int = 0
    # Store credit politikası (en küçük para biriminde). 0 = sınır yok
    credit_is_enabled: bool = False
    credit_min_amount: int = 0
    credit_max_amount: int = 0
    # Önerilen tutarlar, virgülle ayrılmış. Örn: "250000,500000,1000000"
    credit_preset_amounts: str | None = Field(default=None, max_length=256)

    def preset_amounts(self) -> list[int]:
        if not self.credit_preset_amounts:
            return []
        return [int(p) for p in self.credit_preset_amounts.split(",") if p.strip()]


class GiftProduct(SQLModel, table=True):
    __tablename__ = "gift_products"
    id: str = Field(primary_key=True, max_length=64)
    merchant_id: str = Field(foreign_key="merchant.id", index=True)
    title: str
    description: str = ""
    price: Decimal = Field(max_digits=14, decimal_places=2)
    currency: str = Field(default="USD", max_length=8)
    image_url: str = ""
    category: Category = Field(index=True)
    is_active: bool = True
    substitution_policy: str = ""
