"""Katalog (salt-okunur): merchant ve ürün listeleri."""
from fastapi import APIRouter, Depends, HTTPException

from app.api.deps import get_services
from app.models import Category
from app.schemas import GiftProductResponse, MerchantResponse
from app.services.container import GiftServices

router = APIRouter(prefix="/api", tags=["catalog"])


@router.get("/merchants", response_model=list[MerchantResponse])
def list_merchants(
    city: str | None = None,
    category: Category | None = None,
    services: GiftServices = Depends(get_services),
):
    return [MerchantResponse.from_merchant(m) for m in services.catalog.list_merchants(city, category)]


@router.get("/merchants/{merchant_id}", response_model=MerchantResponse)
def get_merchant(merchant_id: str, services: GiftServices = Depends(get_services)):
    merchant = services.catalog.get_merchant(merchant_id)
    if not merchant:
        raise HTTPException(status_code=404, detail="Merchant not found")
    return MerchantResponse.from_merchant(merchant)


@router.get("/merchants/{merchant_id}/products", response_model=list[GiftProductResponse])
def merchant_products(merchant_id: str, services: GiftServices = Depends(get_services)):
    return [GiftProductResponse.from_product(p) for p in services.catalog.list_products(merchant_id=merchant_id)]


@router.get("/products", response_model=list[GiftProductResponse])
def list_products(category: Category | None = None, services: GiftServices = Depends(get_services)):
    return [GiftProductResponse.from_product(p) for p in services.catalog.list_products(category=category)]


@router.get("/products/{product_id}", response_model=GiftProductResponse)
def get_product(product_id: str, services: GiftServices = Depends(get_services)):
    product = services.catalog.get_product(product_id)
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    return GiftProductResponse.from_product(product)
