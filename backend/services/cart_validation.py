# backend/services/cart_validation.py
"""Re-check a client-held cart against the live catalog before committing it."""
import logging
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from sqlalchemy.orm import Session

from config import settings
from models.book import Book
from schemas.cart import Cart, CartItem
from services.errors import AllItemsGone, CartExpired, EmptyCart, InsufficientStock
from services.tax import to_money

logger = logging.getLogger(__name__)


@dataclass
class ValidatedItem:
    item: CartItem
    book: Book
    # Snapshotted price, charged even when the live price has drifted
    unit_price: Decimal

    @property
    def line_total(self) -> Decimal:
        return to_money(self.unit_price * self.item.quantity)


@dataclass
class CartSnapshot:
    valid_items: List[ValidatedItem]
    removed_items: List[int] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    price_warnings: List[str] = field(default_factory=list)

    @property
    def subtotal(self) -> Decimal:
        return sum((v.line_total for v in self.valid_items), Decimal("0.00"))

    @property
    def currency(self) -> str:
        return self.valid_items[0].item.currency

    @property
    def all_warnings(self) -> List[str]:
        return self.warnings + self.price_warnings


def live_price(book: Book, is_member_price: bool) -> Decimal:
    return Decimal(book.member_price if is_member_price else book.sell_price)


def price_drift(captured: Decimal, live: Decimal) -> Decimal:
    """Relative difference between the price the customer saw and today's price."""
    captured = Decimal(captured)
    if captured == 0:
        return Decimal(0) if live == 0 else Decimal(1)
    return abs(live - captured) / captured


def validate_cart(db: Session, cart: Cart, now: Optional[datetime] = None,
                  drift_threshold=None) -> CartSnapshot:
    if cart.is_expired(now):
        raise CartExpired()
    if not cart.items:
        raise EmptyCart()

    threshold = Decimal(str(drift_threshold if drift_threshold is not None else settings.PRICE_DRIFT_THRESHOLD))

    # One query for every book in the cart
    book_ids = [it.book_id for it in cart.items]
    books = {b.id: b for b in db.query(Book).filter(Book.id.in_(book_ids)).all()}

    snapshot = CartSnapshot(valid_items=[])
    for item in cart.items:
        book = books.get(item.book_id)
        if book is None:
            snapshot.removed_items.append(item.book_id)
            snapshot.warnings.append(
                f"Book {item.book_id} is no longer available and was removed from your order"
            )
            continue

        # Partial fulfilment of a line is not supported
        if book.stock_quantity < item.quantity:
            raise InsufficientStock(
                f'Only {book.stock_quantity} copies of "{book.title}" available, '
                f"{item.quantity} requested"
            )

        live = live_price(book, item.is_member_price)
        if price_drift(item.price_at_add, live) > threshold:
            logger.warning(
                "Price drift on book %s: captured %s, live %s", book.id, item.price_at_add, live
            )
            snapshot.price_warnings.append(
                f'The price of "{book.title}" changed from {item.price_at_add} to {live}; '
                f"you were charged the original price"
            )

        snapshot.valid_items.append(ValidatedItem(item=item, book=book, unit_price=to_money(item.price_at_add)))

    if not snapshot.valid_items:
        raise AllItemsGone()

    return snapshot
