from pydantic import EmailStr

from app.models import Category, GiftProduct, Merchant, MerchantRole, MerchantUser

from .gift import CamelModel


class MerchantResponse(CamelModel):
    id: str
    name: str
    description: str
    city: str
    area: str
    address: str
    phone: str
    hours: str
    logo_url: str
    cover_url: str
    is_active: bool
    rating: float
    review_count: int
    credit_is_enabled: bool
    credit_min_amount: int
    credit_max_amount: int
    credit_preset_amounts: list[int]

    @classmethod
    def from_merchant(cls, m: Merchant) -> "MerchantResponse":
        data = m.model_dump()
        data["credit_preset_amounts"] = m.preset_amounts()
        return cls.model_validate(data)


class GiftProductResponse(CamelModel):
    id: str
    merchant_id: str
    title: str
    description: str
    price: float
    currency: str
    image_url: str
    category: Category
    is_active: bool
    substitution_policy: str

    @classmethod
    def from_product(cls, p: GiftProduct) -> "GiftProductResponse":
        return cls.model_validate(p.model_dump())


class MerchantLoginRequest(CamelModel):
    email: EmailStr
    password: str


class MerchantUserResponse(CamelModel):
    id: str
    merchant_id: str
    role: MerchantRole
    email: str
    is_active: bool

    @classmethod
    def from_user(cls, u: MerchantUser) -> "MerchantUserResponse":
        return cls.model_validate(u.model_dump(exclude={"hashed_password"}))


class MerchantLoginResponse(CamelModel):
    token: str
    token_type: str = "bearer"
    user: MerchantUserResponse
