"""Tests for inquiries taken while online ordering is off."""

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest
from pydantic import ValidationError
from sqlalchemy.exc import OperationalError

from conftest import InMemoryCartStore, cart_of
from models.inquiry import Inquiry, InquiryStatus
from schemas.inquiry import InquiryRequest
from services import inquiry as inquiry_service
from services.errors import InquiryNotFound
from services.store_settings import update_store_settings

REQUEST = InquiryRequest(customer_name="Ada Reader", customer_email="ada@example.com",
                         message="Could you hold these until Saturday?")


@pytest.fixture()
def ordering_off(db):
    update_store_settings(db, ordering_enabled=False)


def submit(db, cart, request=REQUEST, **kwargs):
    store = InMemoryCartStore(cart)
    return inquiry_service.submit_inquiry(db, store, request, **kwargs), store


class TestSubmitInquiry:
    def test_snapshots_cart_and_clears_it(self, db, make_book, ordering_off):
        a = make_book("Middlemarch", stock=0, sell_price="20.00")
        b = make_book("Persuasion", stock=4, sell_price="12.50")

        result, store = submit(db, cart_of((a, 2), (b, 1, "11.00")))

        assert result.success, result.error
        assert store.cleared
        inquiry = db.get(Inquiry, result.inquiry_id)
        assert inquiry.status == InquiryStatus.NEW
        assert inquiry.customer_email == "ada@example.com"
        assert inquiry.message == "Could you hold these until Saturday?"
        assert sorted((i.title, i.quantity, i.price) for i in inquiry.items) == [
            ("Middlemarch", 2, Decimal("20.00")),
            ("Persuasion", 1, Decimal("11.00")),
        ]

    def test_does_not_touch_stock(self, db, make_book, ordering_off):
        book = make_book(stock=3)
        submit(db, cart_of((book, 2)))
        db.refresh(book)
        assert book.stock_quantity == 3
        assert book.version == 1

    def test_refused_while_ordering_is_on(self, db, make_book):
        result, store = submit(db, cart_of((make_book(), 1)))

        assert not result.success
        assert result.code == "INQUIRIES_CLOSED"
        assert not store.cleared
        assert db.query(Inquiry).count() == 0

    def test_empty_cart(self, db, ordering_off):
        result, _ = submit(db, cart_of())
        assert result.code == "EMPTY_CART"
        assert result.error == "Your cart is empty"

    def test_expired_cart(self, db, make_book, ordering_off):
        old = datetime.now(timezone.utc) - timedelta(days=8)
        result, _ = submit(db, cart_of((make_book(), 1), created_at=old))
        assert result.code == "CART_EXPIRED"

    def test_vanished_books_are_left_out(self, db, make_book, ordering_off):
        book = make_book()
        result, _ = submit(db, cart_of((book, 1), (404, 1, "9.00")))

        inquiry = db.get(Inquiry, result.inquiry_id)
        assert [i.book_id for i in inquiry.items] == [book.id]

    def test_only_vanished_books(self, db, ordering_off):
        result, store = submit(db, cart_of((404, 1, "9.00")))
        assert result.code == "ALL_ITEMS_GONE"
        assert not store.cleared

    def test_database_error_is_reported(self, db, make_book, ordering_off, monkeypatch):
        book = make_book()

        def broken(session, cart):
            raise OperationalError("SELECT books", {}, Exception("database is locked"))

        monkeypatch.setattr(inquiry_service, "_snapshot_items", broken)
        result, store = submit(db, cart_of((book, 1)))

        assert result.code == "INQUIRY_FAILED"
        assert not store.cleared

    @pytest.mark.parametrize("fields", [
        {"customer_name": "", "customer_email": "ada@example.com"},
        {"customer_name": "x" * 201, "customer_email": "ada@example.com"},
        {"customer_name": "Ada", "customer_email": "not-an-email"},
        {"customer_name": "Ada", "customer_email": "ada@example.com", "message": "x" * 2001},
    ])
    def test_request_limits(self, fields):
        with pytest.raises(ValidationError):
            InquiryRequest(**fields)


class TestFollowUp:
    def test_list_and_update(self, db, make_book, ordering_off):
        book = make_book()
        first, _ = submit(db, cart_of((book, 1)))
        second, _ = submit(db, cart_of((book, 2)))

        inquiry_service.update_inquiry(db, first.inquiry_id, status=InquiryStatus.CONTACTED,
                                       staff_notes="Emailed about Saturday pickup")

        rows, total = inquiry_service.list_inquiries(db)
        assert total == 2
        assert [i.id for i in rows] == [second.inquiry_id, first.inquiry_id]

        rows, total = inquiry_service.list_inquiries(db, status=InquiryStatus.NEW)
        assert [i.id for i in rows] == [second.inquiry_id]
        assert db.get(Inquiry, first.inquiry_id).staff_notes == "Emailed about Saturday pickup"

    def test_unknown_inquiry(self, db):
        with pytest.raises(InquiryNotFound):
            inquiry_service.update_inquiry(db, 999, status=InquiryStatus.RESOLVED)
