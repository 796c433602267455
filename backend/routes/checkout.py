# backend/routes/checkout.py
from typing import Optional
from fastapi import APIRouter, Depends, Request, Response
from sqlalchemy.orm import Session

from config import settings
from database import get_db
from models.users import User
from schemas.checkout import CheckoutRequest, CheckoutResult
from schemas.inquiry import InquiryRequest, InquiryResult
from services.inquiry import submit_inquiry
from services.order_commit import commit_order
from utils.audit import client_ip
from utils.cart_cookie import CookieCartStore, get_cart_store
from utils.http_errors import status_for
from utils.rate_limit import RateLimiter
from utils.square_client import get_payment_gateway
from utils.tokenJWT import get_optional_user

router = APIRouter(prefix="/checkout", tags=["Checkout"])

checkout_rate_limiter = RateLimiter(
    max_requests=settings.CHECKOUT_RATE_LIMIT,
    window_seconds=settings.CHECKOUT_RATE_WINDOW_SECONDS,
)

# Commit the cart in the cookie as an order
@router.post("/create-order", response_model=CheckoutResult, dependencies=[Depends(checkout_rate_limiter)])
async def create_order(
    payload: CheckoutRequest,
    request: Request,
    response: Response,
    db: Session = Depends(get_db),
    store: CookieCartStore = Depends(get_cart_store),
    gateway=Depends(get_payment_gateway),
    current_user: Optional[User] = Depends(get_optional_user),
):
    result = await commit_order(db, store, payload, gateway, customer=current_user, ip=client_ip(request))
    if not result.success:
        response.status_code = status_for(result.code)
    return result

inquiry_rate_limiter = RateLimiter(
    max_requests=settings.INQUIRY_RATE_LIMIT,
    window_seconds=settings.INQUIRY_RATE_WINDOW_SECONDS,
)

# Ask about the books in the cart while online ordering is off
@router.post("/inquiry", response_model=InquiryResult, dependencies=[Depends(inquiry_rate_limiter)])
def create_inquiry(
    payload: InquiryRequest,
    request: Request,
    response: Response,
    db: Session = Depends(get_db),
    store: CookieCartStore = Depends(get_cart_store),
):
    result = submit_inquiry(db, store, payload, ip=client_ip(request))
    if not result.success:
        response.status_code = status_for(result.code)
    return result
