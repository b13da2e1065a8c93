"""Sipariş oluşturma: doğrulama sırası, başlangıç durumu, kod çakışması."""
from datetime import timedelta
from decimal import Decimal

import pytest
from pydantic import ValidationError

from app.core.errors import (
    AmountOutOfRange,
    CreditDisabled,
    InvalidAmount,
    MerchantNotFound,
    ProductMerchantMismatch,
    ProductNotFound,
    ProductRequired,
    RedeemCodeSpaceExhausted,
)
from app.models import GiftOrderStatus, GiftType
from app.services.order_factory import OrderFactory


def test_item_order_initial_state(factory, order_request, clock, store):
    order = factory.create_order(order_request())
    assert order.gift_type == GiftType.ITEM
    assert order.status == GiftOrderStatus.PAID
    assert order.product_id == "p1"
    assert order.amount == Decimal("4.50")
    assert order.currency == "USD"
    assert order.credit_amount is None
    assert order.credit_remaining is None
    assert order.theme_id == "celebration"
    assert order.created_at == clock.now
    assert order.sent_at == clock.now
    assert order.expires_at == clock.now + timedelta(days=90)
    assert order.redeemed_at is None
    assert order.redeemed_by_merchant_user_id is None
    assert order.gift_token != order.redeem_code
    assert store.get_by_id(order.id) is not None


def test_credit_order_initial_state(factory, order_request):
    order = factory.create_order(order_request(gift_type="CREDIT", product_id=None, credit_amount=500000))
    assert order.gift_type == GiftType.CREDIT
    assert order.product_id is None
    assert order.credit_amount == 500000
    assert order.credit_remaining == 500000
    assert order.amount == Decimal(500000)
    assert order.currency == "LBP"


def test_custom_theme_is_kept(factory, order_request):
    order = factory.create_order(order_request(theme_id="thank-you"))
    assert order.theme_id == "thank-you"


def test_merchant_must_exist(factory, order_request):
    with pytest.raises(MerchantNotFound):
        factory.create_order(order_request(merchant_id="nope", product_id=None))


def test_credit_disabled(factory, order_request):
    with pytest.raises(CreditDisabled):
        factory.create_order(order_request(merchant_id="m2", gift_type="CREDIT", credit_amount=500000))


@pytest.mark.parametrize("amount", [None, 0, -5])
def test_credit_amount_must_be_positive(factory, order_request, amount):
    with pytest.raises(InvalidAmount):
        factory.create_order(order_request(gift_type="CREDIT", product_id=None, credit_amount=amount))


@pytest.mark.parametrize("amount", [99999, 2000001])
def test_credit_amount_out_of_range(factory, order_request, amount):
    with pytest.raises(AmountOutOfRange):
        factory.create_order(order_request(gift_type="CREDIT", product_id=None, credit_amount=amount))


@pytest.mark.parametrize("amount", [100000, 2000000])
def test_credit_bounds_are_inclusive(factory, order_request, amount):
    order = factory.create_order(order_request(gift_type="CREDIT", product_id=None, credit_amount=amount))
    assert order.credit_remaining == amount


def test_zero_bounds_mean_unbounded(factory, order_request):
    order = factory.create_order(order_request(merchant_id="m3", gift_type="CREDIT", credit_amount=1))
    assert order.credit_amount == 1


def test_item_requires_product(factory, order_request):
    with pytest.raises(ProductRequired):
        factory.create_order(order_request(product_id=None))


def test_item_product_must_exist(factory, order_request):
    with pytest.raises(ProductNotFound):
        factory.create_order(order_request(product_id="missing"))


def test_item_product_must_belong_to_merchant(factory, order_request):
    with pytest.raises(ProductMerchantMismatch):
        factory.create_order(order_request(product_id="p2"))


def test_creation_is_not_idempotent(factory, order_request):
    a = factory.create_order(order_request())
    b = factory.create_order(order_request())
    assert a.id != b.id
    assert a.redeem_code != b.redeem_code


def test_code_collision_is_retried(store, merchants, products, clock, order_request):
    codes = iter(["AAAAAA", "AAAAAA", "BBBBBB"])
    factory = OrderFactory(store, merchants.get, products.get, clock, code_generator=lambda: next(codes))
    first = factory.create_order(order_request())
    second = factory.create_order(order_request())
    assert first.redeem_code == "AAAAAA"
    assert second.redeem_code == "BBBBBB"


def test_code_space_exhaustion_is_fatal(store, merchants, products, clock, order_request):
    factory = OrderFactory(
        store, merchants.get, products.get, clock, max_code_attempts=3, code_generator=lambda: "CCCCCC"
    )
    first = factory.create_order(order_request())
    with pytest.raises(RedeemCodeSpaceExhausted):
        factory.create_order(order_request())
    assert [o.id for o in store.list_by_merchant("m1")] == [first.id]


def test_quote_matches_created_order(factory, order_request):
    terms = factory.quote(order_request())
    assert terms.amount == Decimal("4.50")
    assert terms.currency == "USD"
    assert terms.product_id == "p1"


@pytest.mark.parametrize("field", ["sender_name", "receiver_name", "receiver_contact"])
def test_blank_party_fields_are_rejected(order_request, field):
    with pytest.raises(ValidationError):
        order_request(**{field: "   "})


def test_request_accepts_camel_case():
    from app.schemas import CreateGiftOrderRequest

    req = CreateGiftOrderRequest.model_validate(
        {
            "giftType": "CREDIT",
            "senderName": " Rami ",
            "receiverName": "Lea",
            "receiverContact": "lea@example.com",
            "deliveryChannel": "email",
            "merchantId": "m1",
            "creditAmount": 250000,
        }
    )
    assert req.gift_type == GiftType.CREDIT
    assert req.sender_name == "Rami"
    assert req.theme_id is None
