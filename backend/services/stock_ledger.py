# backend/services/stock_ledger.py
"""Stock reads and writes for books.

Writes are compare-and-swap on ``books.version``: read quantity and version,
then update only if the version is unchanged. A lost race re-reads and tries
again, a bounded number of times. Nothing here commits; the caller owns the
transaction, so a rollback undoes every decrement made in it.
"""
import logging

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from config import settings
from models.book import Book
from services.errors import BookNotFound, ConcurrentModification, InsufficientStock

logger = logging.getLogger(__name__)


def _read_stock(db: Session, book_id: int):
    # Column select, not the ORM entity, so the identity map can't serve a stale row
    return db.execute(
        select(Book.stock_quantity, Book.version).where(Book.id == book_id)
    ).one_or_none()


def _write_stock(db: Session, book_id: int, expected_version: int, new_quantity: int) -> bool:
    result = db.execute(
        update(Book)
        .where(Book.id == book_id, Book.version == expected_version)
        .values(stock_quantity=new_quantity, version=Book.version + 1)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1


def decrement_stock(db: Session, book_id: int, quantity: int, attempts: int = None) -> int:
    """Take ``quantity`` units of a book off the shelf and return what is left.

    Raises BookNotFound, InsufficientStock (checked on every attempt against
    the freshly read quantity) or ConcurrentModification once ``attempts``
    conditional writes have all lost their race.
    """
    if quantity <= 0:
        raise ValueError("quantity must be positive")
    attempts = attempts or settings.STOCK_RETRY_ATTEMPTS

    for attempt in range(1, attempts + 1):
        row = _read_stock(db, book_id)
        if row is None:
            raise BookNotFound(f"Book {book_id} no longer exists")

        current, version = row
        if current < quantity:
            raise InsufficientStock(
                f"Only {current} copies of book {book_id} available, {quantity} requested"
            )

        if _write_stock(db, book_id, version, current - quantity):
            return current - quantity

        logger.warning(
            "Stock of book %s changed concurrently (attempt %s/%s), retrying",
            book_id, attempt, attempts,
        )

    raise ConcurrentModification()


def restore_stock(db: Session, book_id: int, quantity: int, attempts: int = None) -> int:
    """Put ``quantity`` units back, e.g. after a cancellation. Returns the new quantity."""
    if quantity <= 0:
        raise ValueError("quantity must be positive")
    attempts = attempts or settings.STOCK_RETRY_ATTEMPTS

    for attempt in range(1, attempts + 1):
        row = _read_stock(db, book_id)
        if row is None:
            raise BookNotFound(f"Book {book_id} no longer exists")

        current, version = row
        if _write_stock(db, book_id, version, current + quantity):
            return current + quantity

        logger.warning(
            "Stock of book %s changed concurrently during restore (attempt %s/%s)",
            book_id, attempt, attempts,
        )

    raise ConcurrentModification()
