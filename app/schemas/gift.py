"""Hediye siparişi istek/yanıt şemaları. JSON alanları camelCase (mobil istemci)."""
from datetime import datetime

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel

from app.models import CreditRedemption, DeliveryChannel, GiftOrder, GiftOrderStatus, GiftType


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CreateGiftOrderRequest(CamelModel):
    gift_type: GiftType = GiftType.ITEM
    sender_name: str
    receiver_name: str
    receiver_contact: str
    delivery_channel: DeliveryChannel
    merchant_id: str
    message: str = ""
    theme_id: str | None = None  # boşsa varsayılan tema (celebration)
    product_id: str | None = None  # ITEM için zorunlu
    credit_amount: int | None = None  # CREDIT için zorunlu, LBP
    scheduled_send_at: datetime | None = None  # saklanır, zamanlama uygulanmaz

    @field_validator("sender_name", "receiver_name", "receiver_contact", "merchant_id")
    @classmethod
    def required_text(cls, v: str) -> str:
        v = (v or "").strip()
        if not v:
            raise ValueError("must not be empty")
        return v

    @field_validator("theme_id", "product_id", mode="before")
    @classmethod
    def blank_to_none(cls, v: str | None) -> str | None:
        if v is None:
            return None
        return str(v).strip() or None


class GiftOrderResponse(CamelModel):
    id: str
    gift_type: GiftType
    sender_name: str
    receiver_name: str
    receiver_contact: str
    delivery_channel: DeliveryChannel
    product_id: str | None = None
    merchant_id: str
    amount: float
    credit_amount: int | None = None
    credit_remaining: int | None = None
    currency: str
    message: str
    theme_id: str
    status: GiftOrderStatus
    gift_token: str
    redeem_code: str
    created_at: datetime
    scheduled_send_at: datetime | None = None
    sent_at: datetime | None = None
    redeemed_at: datetime | None = None
    redeemed_by_merchant_user_id: str | None = None
    expires_at: datetime

    @classmethod
    def from_order(cls, order: GiftOrder) -> "GiftOrderResponse":
        return cls.model_validate(order.model_dump())


class CreatedGiftOrderResponse(GiftOrderResponse):
    reveal_url: str


class CreditRedemptionResponse(CamelModel):
    id: str
    seq: int
    amount_deducted: int
    deducted_at: datetime
    merchant_user_id: str
    notes: str | None = None

    @classmethod
    def from_entry(cls, entry: CreditRedemption) -> "CreditRedemptionResponse":
        return cls.model_validate(entry.model_dump())


class OrderLookupResponse(CamelModel):
    order: GiftOrderResponse
    redemptions: list[CreditRedemptionResponse]


class RedeemItemRequest(CamelModel):
    code: str


class RedeemCreditRequest(CamelModel):
    code: str
    # <= 0 burada reddedilmez: servis InvalidAmount döner
    amount_to_deduct: int
    notes: str | None = None


class CreditRedeemResponse(CamelModel):
    order: GiftOrderResponse
    redemption: CreditRedemptionResponse
