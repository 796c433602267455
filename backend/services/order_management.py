# backend/services/order_management.py
"""Status changes, cancellations and lookups for recorded sales."""
import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session, selectinload
from sqlalchemy.exc import SQLAlchemyError

from models.sale import Sale, SaleItem, SaleStatus, SaleStatusHistory, TERMINAL_STATUSES
from services.errors import CheckoutError, InvalidStatusTransition, OrderFailed, OrderNotFound
from services.stock_ledger import restore_stock

logger = logging.getLogger(__name__)

CANCELLABLE_STATUSES = {SaleStatus.PENDING, SaleStatus.PROCESSING}


def _load_options():
    return (
        selectinload(Sale.items).selectinload(SaleItem.book),
        selectinload(Sale.status_history),
    )


def get_order(db: Session, sale_id: int) -> Sale:
    sale = db.query(Sale).options(*_load_options()).filter(Sale.id == sale_id).first()
    if sale is None:
        raise OrderNotFound()
    return sale


def update_order_status(db: Session, sale_id: int, new_status: SaleStatus,
                        note: Optional[str] = None, user_id: Optional[int] = None) -> Sale:
    sale = get_order(db, sale_id)
    old_status = sale.status

    # Cancelled and refunded are final
    if old_status in TERMINAL_STATUSES and new_status != old_status:
        raise InvalidStatusTransition(f"Cannot change status of {old_status.value.lower()} order")

    sale.status = new_status
    sale.status_history.append(SaleStatusHistory(
        status=new_status,
        timestamp=datetime.now(timezone.utc),
        note=note or f"Status changed from {old_status.value} to {new_status.value}",
        changed_by=user_id,
    ))
    db.commit()
    db.refresh(sale)
    return sale


def cancel_order(db: Session, sale_id: int, reason: str, user_id: Optional[int] = None,
                 restore: bool = True) -> Sale:
    sale = get_order(db, sale_id)

    if sale.status == SaleStatus.CANCELLED:
        raise InvalidStatusTransition("Order is already cancelled")
    if sale.status not in CANCELLABLE_STATUSES:
        raise InvalidStatusTransition(
            f"Cannot cancel order with status {sale.status.value}. Please process a refund instead."
        )

    now = datetime.now(timezone.utc)
    try:
        if restore:
            for item in sale.items:
                restore_stock(db, item.book_id, item.quantity)

        sale.status = SaleStatus.CANCELLED
        sale.cancelled_at = now
        sale.cancelled_by = user_id
        sale.cancellation_reason = reason
        sale.status_history.append(SaleStatusHistory(
            status=SaleStatus.CANCELLED, timestamp=now, note=f"Order cancelled: {reason}", changed_by=user_id,
        ))
        db.commit()
    except CheckoutError:
        db.rollback()
        raise
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("Failed to cancel sale %s", sale_id)
        raise OrderFailed("Failed to cancel order") from e

    db.refresh(sale)
    return sale


def get_customer_orders(db: Session, customer_id: Optional[int] = None, customer_email: Optional[str] = None,
                        status: Optional[SaleStatus] = None, page: int = 1, page_size: int = 10):
    """Return ``(sales, total)`` for a customer, newest first."""
    conditions = []
    if customer_id:
        conditions.append(Sale.customer_id == customer_id)
    if customer_email:
        conditions.append(Sale.customer_email == customer_email)
    if not conditions:
        return [], 0

    q = db.query(Sale).filter(or_(*conditions))
    if status:
        q = q.filter(Sale.status == status)

    total = q.count()
    rows = (
        q.options(*_load_options())
        .order_by(Sale.sale_date.desc(), Sale.id.desc())
        .offset((page - 1) * page_size)
        .limit(page_size)
        .all()
    )
    return rows, total
