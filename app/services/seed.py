"""Demo verisi: merchant, ürün ve merchant kullanıcıları. Tekrar çalıştırılabilir."""
import logging
from decimal import Decimal

from sqlalchemy.engine import Engine
from sqlmodel import Session

from app.core.security import hash_password
from app.models import Category, GiftProduct, Merchant, MerchantRole, MerchantUser

log = logging.getLogger("giftlink.seed")

DEMO_PASSWORD = "demo1234"

DEMO_MERCHANTS = [
    Merchant(
        id="m-beans",
        name="Beans & Co",
        description="Specialty coffee roasters",
        city="Beirut",
        area="Mar Mikhael",
        address="Armenia Street",
        phone="+9611000001",
        hours="07:00-22:00",
        rating=4.7,
        review_count=312,
        credit_is_enabled=True,
        credit_min_amount=100000,
        credit_max_amount=2000000,
        credit_preset_amounts="250000,500000,1000000",
    ),
    Merchant(
        id="m-bloom",
        name="Bloom Atelier",
        description="Seasonal bouquets",
        city="Beirut",
        area="Achrafieh",
        phone="+9611000002",
        hours="09:00-20:00",
        rating=4.5,
        review_count=98,
    ),
    Merchant(
        id="m-cedar-spa",
        name="Cedar Spa",
        city="Byblos",
        credit_is_enabled=True,
        is_active=False,
    ),
]

DEMO_PRODUCTS = [
    GiftProduct(
        id="p-flat-white", merchant_id="m-beans", title="Flat White", price=Decimal("4.50"),
        currency="USD", category=Category.COFFEE,
    ),
    GiftProduct(
        id="p-cheesecake", merchant_id="m-beans", title="Lotus Cheesecake", price=Decimal("6.00"),
        currency="USD", category=Category.DESSERT,
    ),
    GiftProduct(
        id="p-peonies", merchant_id="m-bloom", title="Peony Bouquet", price=Decimal("35.00"),
        currency="USD", category=Category.FLOWERS, substitution_policy="Similar seasonal flowers",
    ),
]

DEMO_USERS = [
    ("u-beans-owner", "m-beans", MerchantRole.OWNER, "owner@beansandco.com", True),
    ("u-beans-staff", "m-beans", MerchantRole.STAFF, "staff@beansandco.com", True),
    ("u-bloom-staff", "m-bloom", MerchantRole.STAFF, "staff@bloomatelier.com", True),
    ("u-beans-former", "m-beans", MerchantRole.STAFF, "former@beansandco.com", False),
]


def seed_demo_data(engine: Engine) -> int:
    """Eksik demo kayıtlarını ekler; eklenen kayıt sayısını döner."""
    added = 0
    with Session(engine) as db:
        for m in DEMO_MERCHANTS:
            if db.get(Merchant, m.id) is None:
                db.add(Merchant.model_validate(m.model_dump()))
                added += 1
        db.commit()
        for p in DEMO_PRODUCTS:
            if db.get(GiftProduct, p.id) is None:
                db.add(GiftProduct.model_validate(p.model_dump()))
                added += 1
        for uid, merchant_id, role, email, active in DEMO_USERS:
            if db.get(MerchantUser, uid) is None:
                db.add(
                    MerchantUser(
                        id=uid,
                        merchant_id=merchant_id,
                        role=role,
                        email=email,
                        hashed_password=hash_password(DEMO_PASSWORD),
                        is_active=active,
                    )
                )
                added += 1
        db.commit()
    if added:
        log.info("Seeded %d demo records", added)
    return added
