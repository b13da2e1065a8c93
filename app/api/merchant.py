"""Merchant portalı: giriş, kod sorgulama, redeem ve geçmiş."""
import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlmodel import Session, select

from app.api.deps import get_current_merchant_user, get_services
from app.core.database import get_db
from app.core.rate_limit import LOGIN_LIMIT, REDEEM_LIMIT, client_ip, limiter
from app.core.security import create_access_token, verify_password
from app.models import AuditLog, MerchantUser, SecurityLog
from app.schemas import (
    CreditRedeemResponse,
    CreditRedemptionResponse,
    GiftOrderResponse,
    MerchantLoginRequest,
    MerchantLoginResponse,
    MerchantUserResponse,
    OrderLookupResponse,
    RedeemCreditRequest,
    RedeemItemRequest,
)
from app.services.container import GiftServices

router = APIRouter(prefix="/api/merchant", tags=["merchant"])
log = logging.getLogger("giftlink.merchant")


def _audit(db: Session, event: str, user_id: str | None, ip: str | None, order_id: str | None = None, detail: str | None = None) -> None:
    try:
        db.add(AuditLog(event=event, merchant_user_id=user_id, order_id=order_id, ip=ip, detail=detail))
        db.commit()
    except Exception as e:
        db.rollback()
        log.warning("AuditLog write failed (%s): %s", event, e)


def _lookup_response(order, redemptions) -> OrderLookupResponse:
    return OrderLookupResponse(
        order=GiftOrderResponse.from_order(order),
        redemptions=[CreditRedemptionResponse.from_entry(r) for r in redemptions],
    )


@router.post("/login", response_model=MerchantLoginResponse)
@limiter.limit(LOGIN_LIMIT)
def login(request: Request, body: MerchantLoginRequest, db: Session = Depends(get_db)):
    email = body.email.strip().lower()
    user = db.exec(select(MerchantUser).where(MerchantUser.email == email)).first()
    ip = client_ip(request)
    if not user or not verify_password(body.password, user.hashed_password) or not user.is_active:
        try:
            db.add(SecurityLog(
                event="failed_login",
                merchant_user_id=user.id if user else None,
                ip=ip,
                endpoint="/api/merchant/login",
                detail="inactive" if user and user.is_active is False else email,
            ))
            db.commit()
        except Exception as e:
            db.rollback()
            log.warning("SecurityLog failed_login write failed: %s", e)
        raise HTTPException(status_code=401, detail="Invalid credentials.")
    # Yanıt audit commit'inden önce kurulur: commit `user` satırını expire eder
    response = MerchantLoginResponse(
        token=create_access_token({"sub": user.id, "merchant_id": user.merchant_id}),
        user=MerchantUserResponse.from_user(user),
    )
    _audit(db, "merchant_login", response.user.id, ip)
    return response


@router.get("/orders", response_model=list[GiftOrderResponse])
def order_history(
    user: MerchantUser = Depends(get_current_merchant_user),
    services: GiftServices = Depends(get_services),
):
    return [GiftOrderResponse.from_order(o) for o in services.redemption.history(user.merchant_id)]


@router.get("/orders/by-code/{code}", response_model=OrderLookupResponse)
def lookup_by_code(
    code: str,
    user: MerchantUser = Depends(get_current_merchant_user),
    services: GiftServices = Depends(get_services),
):
    order, redemptions = services.redemption.lookup(code, user.merchant_id)
    return _lookup_response(order, redemptions)


@router.get("/orders/{order_id}", response_model=OrderLookupResponse)
def order_detail(
    order_id: str,
    user: MerchantUser = Depends(get_current_merchant_user),
    services: GiftServices = Depends(get_services),
):
    order, redemptions = services.redemption.order_detail(order_id, user.merchant_id)
    return _lookup_response(order, redemptions)


@router.post("/redeem/item", response_model=GiftOrderResponse)
@limiter.limit(REDEEM_LIMIT)
def redeem_item(
    request: Request,
    body: RedeemItemRequest,
    user: MerchantUser = Depends(get_current_merchant_user),
    services: GiftServices = Depends(get_services),
    db: Session = Depends(get_db),
):
    order = services.redemption.redeem_item(body.code, user.id, user.merchant_id)
    _audit(db, "redeem_item", user.id, client_ip(request), order_id=order.id)
    return GiftOrderResponse.from_order(order)


@router.post("/redeem/credit", response_model=CreditRedeemResponse)
@limiter.limit(REDEEM_LIMIT)
def redeem_credit(
    request: Request,
    body: RedeemCreditRequest,
    user: MerchantUser = Depends(get_current_merchant_user),
    services: GiftServices = Depends(get_services),
    db: Session = Depends(get_db),
):
    order, entry = services.redemption.redeem_credit(
        body.code, body.amount_to_deduct, user.id, user.merchant_id, notes=body.notes
    )
    _audit(db, "redeem_credit", user.id, client_ip(request), order_id=order.id, detail=str(entry.amount_deducted))
    return CreditRedeemResponse(
        order=GiftOrderResponse.from_order(order),
        redemption=CreditRedemptionResponse.from_entry(entry),
    )
