from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlmodel import Session

from app.core.database import get_db
from app.core.security import decode_access_token
from app.models import MerchantUser
from app.services.container import GiftServices

security = HTTPBearer(auto_error=False)


def get_services(request: Request) -> GiftServices:
    return request.app.state.services


def get_current_merchant_user_id(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> str:
    if not credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Merchant login required.",
            headers={"WWW-Authenticate": "Bearer"},
        )
    payload = decode_access_token(credentials.credentials)
    if not payload or "sub" not in payload:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token.",
        )
    return str(payload["sub"])


def get_current_merchant_user(
    user_id: str = Depends(get_current_merchant_user_id),
    db: Session = Depends(get_db),
) -> MerchantUser:
    user = db.get(MerchantUser, user_id)
    if not user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Merchant user not found.")
    if not user.is_active:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Merchant user is deactivated.")
    return user
