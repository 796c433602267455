# backend/routes/cart.py
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from database import get_db
from models.users import User
from schemas.cart import CartAddItem, CartUpdateItem, CartOut
from services import cart as cart_service
from services.errors import CheckoutError
from utils.audit import write_log, client_ip
from utils.cart_cookie import CookieCartStore, get_cart_store
from utils.http_errors import to_http_exception
from utils.tokenJWT import get_optional_user

router = APIRouter(prefix="/cart", tags=["Cart"])

def _save(store: CookieCartStore, cart):
    try:
        store.save_cart(cart)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

@router.get("", response_model=CartOut)
def get_cart(
    db: Session = Depends(get_db),
    store: CookieCartStore = Depends(get_cart_store),
):
    return cart_service.populate_cart(db, store.read_active_cart())

@router.post("/add", response_model=CartOut)
def add_to_cart(
    payload: CartAddItem,
    request: Request,
    db: Session = Depends(get_db),
    store: CookieCartStore = Depends(get_cart_store),
    current_user: Optional[User] = Depends(get_optional_user),
):
    try:
        cart = cart_service.add_to_cart(
            db, store.read_active_cart(), payload.book_id, payload.quantity, payload.is_member_price
        )
    except CheckoutError as e:
        raise to_http_exception(e)
    _save(store, cart)

    out = cart_service.populate_cart(db, cart)
    write_log(
        db,
        user_id=current_user.id if current_user else None,
        action="CART_ADD",
        resource="cart",
        status="SUCCESS",
        ip=client_ip(request),
        meta={"book_id": payload.book_id, "quantity": payload.quantity, "cart_items": len(out.items)},
    )
    return out

@router.put("/items/{book_id}", response_model=CartOut)
def update_cart_item(
    book_id: int,
    payload: CartUpdateItem,
    db: Session = Depends(get_db),
    store: CookieCartStore = Depends(get_cart_store),
):
    try:
        cart = cart_service.update_quantity(db, store.read_active_cart(), book_id, payload.quantity)
    except CheckoutError as e:
        raise to_http_exception(e)
    _save(store, cart)
    return cart_service.populate_cart(db, cart)

@router.delete("/items/{book_id}", response_model=CartOut)
def delete_cart_item(
    book_id: int,
    db: Session = Depends(get_db),
    store: CookieCartStore = Depends(get_cart_store),
):
    cart = cart_service.remove_from_cart(store.read_active_cart(), book_id)
    _save(store, cart)
    return cart_service.populate_cart(db, cart)

@router.delete("", status_code=204)
def clear_cart(store: CookieCartStore = Depends(get_cart_store)):
    store.clear_cart()
