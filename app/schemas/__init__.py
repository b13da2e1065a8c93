from .gift import (
    CreateGiftOrderRequest,
    CreatedGiftOrderResponse,
    CreditRedeemResponse,
    CreditRedemptionResponse,
    GiftOrderResponse,
    OrderLookupResponse,
    RedeemCreditRequest,
    RedeemItemRequest,
)
from .merchant import (
    GiftProductResponse,
    MerchantLoginRequest,
    MerchantLoginResponse,
    MerchantResponse,
    MerchantUserResponse,
)

__all__ = [
    "CreateGiftOrderRequest",
    "CreatedGiftOrderResponse",
    "CreditRedeemResponse",
    "CreditRedemptionResponse",
    "GiftOrderResponse",
    "GiftProductResponse",
    "MerchantLoginRequest",
    "MerchantLoginResponse",
    "MerchantResponse",
    "MerchantUserResponse",
    "OrderLookupResponse",
    "RedeemCreditRequest",
    "RedeemItemRequest",
]
