"""Katalog okumaları (merchant, ürün). Çekirdek için salt-okunur referans veri."""
from sqlalchemy.engine import Engine
from sqlmodel import Session, select

from app.models import Category, GiftProduct, Merchant


class SqlCatalog:
    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    def get_merchant(self, merchant_id: str) -> Merchant | None:
        with Session(self._engine) as db:
            return db.get(Merchant, merchant_id)

    def get_product(self, product_id: str) -> GiftProduct | None:
        with Session(self._engine) as db:
            return db.get(GiftProduct, product_id)

    def list_merchants(self, city: str | None = None, category: Category | None = None) -> list[Merchant]:
        """Aktif merchant'lar; şehir büyük/küçük harf duyarsız, kategori = o kategoride aktif ürünü olanlar."""
        with Session(self._engine) as db:
            stmt = select(Merchant).where(Merchant.is_active == True)  # noqa: E712
            rows = list(db.exec(stmt.order_by(Merchant.name)).all())
            if city and (city := city.strip()):
                rows = [m for m in rows if m.city.lower() == city.lower()]
            if category:
                ids = set(
                    db.exec(
                        select(GiftProduct.merchant_id).where(
                            GiftProduct.category == category,
                            GiftProduct.is_active == True,  # noqa: E712
                        )
                    ).all()
                )
                rows = [m for m in rows if m.id in ids]
            return rows

    def list_products(self, merchant_id: str | None = None, category: Category | None = None) -> list[GiftProduct]:
        with Session(self._engine) as db:
            stmt = select(GiftProduct).where(GiftProduct.is_active == True)  # noqa: E712
            if merchant_id:
                stmt = stmt.where(GiftProduct.merchant_id == merchant_id)
            if category:
                stmt = stmt.where(GiftProduct.category == category)
            if not merchant_id and not category:
                # Tümü: yalnızca aktif merchant'ların ürünleri
                stmt = stmt.join(Merchant, Merchant.id == GiftProduct.merchant_id).where(
                    Merchant.is_active == True  # noqa: E712
                )
            return list(db.exec(stmt.order_by(GiftProduct.title)).all())
