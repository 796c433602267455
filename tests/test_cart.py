"""Tests for the signed cart cookie and cart mutations."""

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest
from jose import jwt
from starlette.requests import Request
from starlette.responses import Response

from config import settings
from conftest import cart_of
from schemas.cart import Cart, MAX_ITEM_QUANTITY
from services import cart as cart_service
from services.errors import BookNotFound, CartLimitExceeded, InsufficientStock, ItemNotInCart
from utils.cart_cookie import CART_COOKIE_NAME, CookieCartStore, decode_cart, encode_cart


def request_with_cookie(token=None):
    headers = []
    if token:
        headers.append((b"cookie", f"{CART_COOKIE_NAME}={token}".encode()))
    return Request({"type": "http", "method": "GET", "path": "/cart", "headers": headers})


class TestCartCookie:
    def test_encode_decode(self, make_book):
        book = make_book()
        cart = cart_of((book, 2))

        decoded = decode_cart(encode_cart(cart))

        assert decoded.items[0].book_id == book.id
        assert decoded.items[0].quantity == 2
        assert decoded.items[0].price_at_add == Decimal("20.00")
        assert decoded.expires_at == cart.expires_at

    def test_tampered_token_is_no_cart(self, make_book):
        token = encode_cart(cart_of((make_book(), 1)))
        header, payload, signature = token.split(".")
        assert decode_cart(f"{header}.{payload}.{signature[::-1]}") is None

    def test_foreign_key_is_no_cart(self):
        foreign = jwt.encode({"cart": {}}, "x" * 40, algorithm="HS256")
        assert decode_cart(foreign) is None

    def test_malformed_cart_is_no_cart(self):
        token = jwt.encode({"cart": {"items": "nope"}}, settings.CART_ENCRYPTION_SECRET, algorithm="HS256")
        assert decode_cart(token) is None

    def test_short_secret_is_refused(self, monkeypatch):
        monkeypatch.setattr(settings, "CART_ENCRYPTION_SECRET", "too-short")
        with pytest.raises(RuntimeError):
            encode_cart(Cart.empty())

    def test_store_reads_missing_cookie_as_empty(self):
        store = CookieCartStore(request_with_cookie(), Response())
        assert store.read_cart().items == []

    def test_expired_cart_is_kept_for_checkout(self, make_book):
        old = datetime.now(timezone.utc) - timedelta(days=8)
        token = encode_cart(cart_of((make_book(), 1), created_at=old))
        store = CookieCartStore(request_with_cookie(token), Response())

        assert store.read_cart().is_expired()
        assert store.read_active_cart().items == []

    def test_save_sets_http_only_cookie(self, make_book):
        response = Response()
        CookieCartStore(request_with_cookie(), response).save_cart(cart_of((make_book(), 1)))

        header = response.headers["set-cookie"]
        assert header.startswith(f"{CART_COOKIE_NAME}=")
        assert "HttpOnly" in header
        assert "samesite=lax" in header.lower()

    def test_clear_expires_cookie(self):
        response = Response()
        CookieCartStore(request_with_cookie(), response).clear_cart()
        assert 'Max-Age=0' in response.headers["set-cookie"]


class TestCartMutations:
    def test_add_captures_live_price(self, db, make_book):
        book = make_book(sell_price="20.00", member_price="18.00")

        cart = cart_service.add_to_cart(db, Cart.empty(), book.id, 1, is_member_price=True)

        assert cart.items[0].price_at_add == Decimal("18.00")
        assert cart.items[0].is_member_price
        assert cart.items[0].currency == "AUD"

    def test_add_again_keeps_first_price(self, db, make_book):
        book = make_book(stock=5, sell_price="20.00")
        cart = cart_service.add_to_cart(db, Cart.empty(), book.id, 1)
        book.sell_price = Decimal("25.00")
        db.commit()

        cart = cart_service.add_to_cart(db, cart, book.id, 2)

        assert len(cart.items) == 1
        assert cart.items[0].quantity == 3
        assert cart.items[0].price_at_add == Decimal("20.00")

    def test_add_does_not_mutate_input(self, db, make_book):
        book = make_book()
        original = Cart.empty()
        cart_service.add_to_cart(db, original, book.id)
        assert original.items == []

    def test_add_beyond_stock(self, db, make_book):
        book = make_book(stock=2)
        with pytest.raises(InsufficientStock):
            cart_service.add_to_cart(db, Cart.empty(), book.id, 3)

    def test_add_unknown_book(self, db):
        with pytest.raises(BookNotFound):
            cart_service.add_to_cart(db, Cart.empty(), 404)

    def test_quantity_cap(self, db, make_book):
        book = make_book(stock=500)
        cart = cart_service.add_to_cart(db, Cart.empty(), book.id, MAX_ITEM_QUANTITY)
        with pytest.raises(CartLimitExceeded):
            cart_service.add_to_cart(db, cart, book.id, 1)

    def test_update_and_remove(self, db, make_book):
        a, b = make_book("Emma", stock=5), make_book("Persuasion", stock=5)
        cart = cart_of((a, 1), (b, 1))

        cart = cart_service.update_quantity(db, cart, a.id, 4)
        assert cart.find(a.id).quantity == 4

        cart = cart_service.remove_from_cart(cart, b.id)
        assert [it.book_id for it in cart.items] == [a.id]

    def test_update_item_not_in_cart(self, db, make_book):
        book = make_book()
        with pytest.raises(ItemNotInCart):
            cart_service.update_quantity(db, Cart.empty(), book.id, 1)

    def test_populate_skips_vanished_books(self, db, make_book):
        book = make_book(sell_price="12.50")
        out = cart_service.populate_cart(db, cart_of((book, 2), (404, 1, "9.00")))

        assert [it.book_id for it in out.items] == [book.id]
        assert out.item_count == 2
        assert out.subtotal == Decimal("25.00")
        assert out.currency == "AUD"
