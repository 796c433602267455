# backend/utils/cart_cookie.py
import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import Request, Response
from jose import jwt, JWTError
from pydantic import ValidationError

from config import settings
from schemas.cart import Cart, CART_EXPIRY_DAYS

logger = logging.getLogger(__name__)

CART_COOKIE_NAME = "bookshop_cart"
CART_COOKIE_MAX_AGE = CART_EXPIRY_DAYS * 24 * 60 * 60
# Browsers drop cookies above ~4KB
MAX_COOKIE_SIZE_BYTES = 4000
CART_ALGORITHM = "HS256"


def _secret() -> str:
    secret = settings.CART_ENCRYPTION_SECRET
    if not secret or len(secret) < 32:
        raise RuntimeError("CART_ENCRYPTION_SECRET must be at least 32 characters long")
    return secret


def encode_cart(cart: Cart) -> str:
    # No JWT exp claim: cart.expires_at decides expiry so checkout can report it
    claims = {"cart": cart.model_dump(mode="json"), "iat": int(datetime.now(timezone.utc).timestamp())}
    return jwt.encode(claims, _secret(), algorithm=CART_ALGORITHM)


def decode_cart(token: str) -> Optional[Cart]:
    # Tampered, foreign or malformed tokens read as "no cart"
    try:
        claims = jwt.decode(token, _secret(), algorithms=[CART_ALGORITHM])
        return Cart.model_validate(claims["cart"])
    except (JWTError, KeyError, TypeError, ValidationError) as e:
        logger.info("Discarding unreadable cart cookie: %s", e.__class__.__name__)
        return None


class CookieCartStore:
    """Cart persisted client-side in a signed cookie."""

    def __init__(self, request: Request, response: Response):
        self.request = request
        self.response = response

    def read_cart(self) -> Cart:
        # Expired carts are returned as-is; checkout rejects them explicitly
        token = self.request.cookies.get(CART_COOKIE_NAME)
        cart = decode_cart(token) if token else None
        return cart or Cart.empty()

    def read_active_cart(self) -> Cart:
        cart = self.read_cart()
        return Cart.empty() if cart.is_expired() else cart

    def save_cart(self, cart: Cart) -> None:
        token = encode_cart(cart)
        if len(token) > MAX_COOKIE_SIZE_BYTES:
            raise ValueError("Cart is too large to store")
        self.response.set_cookie(
            CART_COOKIE_NAME,
            token,
            max_age=CART_COOKIE_MAX_AGE,
            httponly=True,
            samesite="lax",
            secure=settings.CART_COOKIE_SECURE,
            path="/",
        )

    def clear_cart(self) -> None:
        self.response.delete_cookie(CART_COOKIE_NAME, path="/")


def get_cart_store(request: Request, response: Response) -> CookieCartStore:
    return CookieCartStore(request, response)
