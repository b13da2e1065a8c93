"""Gönderen ve alıcı tarafı: sipariş oluşturma, token ile hediye açma."""
import logging
from urllib.parse import urlencode

from fastapi import APIRouter, Depends, HTTPException, status

from app.core.config import settings
from app.core.errors import NotFound, PaymentFailed
from app.api.deps import get_services
from app.schemas import CreateGiftOrderRequest, CreatedGiftOrderResponse, GiftOrderResponse
from app.services.container import GiftServices
from app.services.payment import PaymentRequest

router = APIRouter(prefix="/api/orders", tags=["orders"])
log = logging.getLogger("giftlink.api")


def reveal_url(order_id: str, token: str) -> str:
    return f"{settings.frontend_url}/gift/reveal?{urlencode({'orderId': order_id, 't': token})}"


@router.post("", response_model=CreatedGiftOrderResponse, status_code=status.HTTP_201_CREATED)
def create_order(body: CreateGiftOrderRequest, services: GiftServices = Depends(get_services)):
    # Önce doğrula ve tahsil et; ödeme başarısızsa sipariş oluşmaz
    terms = services.factory.quote(body)
    result = services.payments.pay(
        PaymentRequest(
            amount=terms.amount,
            currency=terms.currency,
            metadata={"merchantId": body.merchant_id, "giftType": body.gift_type.value},
        )
    )
    if not result.success:
        log.warning("Payment failed merchant=%s: %s", body.merchant_id, result.error_message)
        raise PaymentFailed(result.error_message or None)
    order = services.factory.create_order(body)
    data = order.model_dump()
    data["reveal_url"] = reveal_url(order.id, order.gift_token)
    return CreatedGiftOrderResponse.model_validate(data)


@router.get("/{order_id}", response_model=GiftOrderResponse)
def get_order(order_id: str, t: str | None = None, services: GiftServices = Depends(get_services)):
    """Alıcı görünümü. Yanlış token ile olmayan sipariş aynı 404'ü alır."""
    if not t:
        raise HTTPException(status_code=400, detail="Token required")
    order = services.store.get_by_token(order_id, t)
    if order is None:
        raise NotFound()
    return GiftOrderResponse.from_order(order)
