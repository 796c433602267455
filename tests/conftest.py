import asyncio
from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

import models  # noqa: F401
from database import Base
from models.book import Book
from models.users import User
from schemas.cart import Cart, CartItem
from utils.square_client import GatewayPayment


class InMemoryCartStore:
    def __init__(self, cart):
        self.cart = cart
        self.cleared = False

    def read_cart(self):
        return self.cart

    def clear_cart(self):
        self.cart = Cart.empty()
        self.cleared = True


class FakeGateway:
    """Stands in for Square. Yields to the event loop like a real HTTP call."""

    def __init__(self, payments=None, error=None, on_fetch=None):
        self.payments = {p.id: p for p in (payments or [])}
        self.error = error
        self.on_fetch = on_fetch
        self.calls = []

    async def get_payment(self, payment_id):
        self.calls.append(payment_id)
        await asyncio.sleep(0)
        if self.on_fetch:
            self.on_fetch(payment_id)
        if self.error:
            raise self.error
        return self.payments.get(payment_id)


def payment(payment_id, cents, currency="AUD", status="COMPLETED"):
    return GatewayPayment(
        id=payment_id, status=status, amount_minor_units=cents, currency=currency,
        receipt_url=f"https://squareup.com/receipt/preview/{payment_id}",
    )


def cart_of(*lines, created_at=None):
    """Build a cart from (book, quantity) or (book, quantity, price_at_add, is_member) tuples."""
    created_at = created_at or datetime.now(timezone.utc)
    items = []
    for line in lines:
        book, quantity = line[0], line[1]
        is_member = line[3] if len(line) > 3 else False
        price = line[2] if len(line) > 2 else (book.member_price if is_member else book.sell_price)
        book_id = book if isinstance(book, int) else book.id
        items.append(CartItem(
            book_id=book_id, quantity=quantity, price_at_add=Decimal(str(price)),
            currency="AUD", is_member_price=is_member,
        ))
    return Cart(items=items, created_at=created_at, expires_at=created_at + timedelta(days=7))


@pytest.fixture()
def engine(tmp_path):
    engine = create_engine(
        f"sqlite:///{tmp_path / 'bookshop_test.db'}", connect_args={"check_same_thread": False}
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture()
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture()
def make_book(db):
    def _make(title="Middlemarch", stock=5, sell_price="20.00", member_price="18.00", currency="AUD"):
        book = Book(
            title=title, author="George Eliot", sell_price=Decimal(sell_price),
            member_price=Decimal(member_price), currency=currency, stock_quantity=stock,
        )
        db.add(book)
        db.commit()
        db.refresh(book)
        return book
    return _make


@pytest.fixture()
def make_user(db):
    def _make(email="reader@example.com", role="customer"):
        user = User(email=email, role=role, first_name="Ada", last_name="Reader")
        db.add(user)
        db.commit()
        db.refresh(user)
        return user
    return _make
