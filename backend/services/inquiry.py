# backend/services/inquiry.py
"""Book inquiries, the fallback for a store that has switched online
ordering off. The cart is snapshotted into an inquiry and cleared; no stock
is reserved and nothing is charged."""
import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from models.book import Book
from models.inquiry import Inquiry, InquiryItem, InquiryStatus
from schemas.inquiry import InquiryRequest, InquiryResult
from services.errors import (
    AllItemsGone, CartExpired, CheckoutError, EmptyCart, InquiriesClosed, InquiryFailed, InquiryNotFound,
)
from services.store_settings import get_store_settings
from services.tax import to_money
from utils.audit import write_log

logger = logging.getLogger(__name__)


def _snapshot_items(db: Session, cart) -> List[InquiryItem]:
    ids = [it.book_id for it in cart.items]
    books = {b.id: b for b in db.query(Book).filter(Book.id.in_(ids)).all()}
    # Books deleted since they were added are left out
    return [
        InquiryItem(
            book_id=it.book_id,
            title=books[it.book_id].title,
            quantity=it.quantity,
            price=to_money(it.price_at_add),
        )
        for it in cart.items
        if it.book_id in books
    ]


def submit_inquiry(db: Session, cart_store, request: InquiryRequest, now: Optional[datetime] = None,
                   ip: Optional[str] = None) -> InquiryResult:
    try:
        if get_store_settings(db).ordering_enabled:
            raise InquiriesClosed()

        cart = cart_store.read_cart()
        if cart.is_expired(now):
            raise CartExpired()
        if not cart.items:
            raise EmptyCart("Your cart is empty")

        items = _snapshot_items(db, cart)
        if not items:
            raise AllItemsGone()

        inquiry = Inquiry(
            customer_name=request.customer_name,
            customer_email=request.customer_email,
            message=request.message or None,
            status=InquiryStatus.NEW,
            items=items,
        )
        db.add(inquiry)
        db.commit()
    except CheckoutError as e:
        logger.info("Inquiry rejected: %s", e.code)
        return InquiryResult(success=False, error=e.message, code=e.code)
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Database error while saving inquiry")
        return InquiryResult(success=False, error=InquiryFailed.default_message, code=InquiryFailed.code)

    cart_store.clear_cart()

    inquiry_id = inquiry.id
    try:
        write_log(db, user_id=None, action="INQUIRY", resource="inquiries", status="SUCCESS", ip=ip,
                  meta={"inquiry_id": inquiry_id, "items": len(items)})
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Failed to write audit log for inquiry %s", inquiry_id)

    logger.info("Inquiry %s recorded with %s books", inquiry_id, len(items))
    return InquiryResult(success=True, inquiry_id=inquiry_id)


def list_inquiries(db: Session, status: Optional[InquiryStatus] = None, page: int = 1, page_size: int = 20):
    """Return ``(inquiries, total)``, newest first."""
    q = db.query(Inquiry)
    if status:
        q = q.filter(Inquiry.status == status)
    total = q.count()
    rows = (
        q.options(selectinload(Inquiry.items))
        .order_by(Inquiry.created_at.desc(), Inquiry.id.desc())
        .offset((page - 1) * page_size)
        .limit(page_size)
        .all()
    )
    return rows, total


def update_inquiry(db: Session, inquiry_id: int, status: Optional[InquiryStatus] = None,
                   staff_notes: Optional[str] = None) -> Inquiry:
    inquiry = db.get(Inquiry, inquiry_id)
    if inquiry is None:
        raise InquiryNotFound()
    if status is not None:
        inquiry.status = status
    if staff_notes is not None:
        inquiry.staff_notes = staff_notes
    db.commit()
    db.refresh(inquiry)
    return inquiry
