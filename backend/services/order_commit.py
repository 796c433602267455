# backend/services/order_commit.py
"""Turn the customer's cart into a sale.

START -> CART_VALIDATED -> PAYMENT_VERIFIED -> STOCK_RESERVED
      -> ORDER_RECORDED -> CART_CLEARED, or FAILED from any step.

Stock decrements, line items and the sale are written in one database
transaction: if any book can't be decremented nothing is persisted. The
card payment, however, has already been captured client-side by then, so a
failure after PAYMENT_VERIFIED is logged as a reconciliation case. Refunds
are a manual, business decision and are not issued here.
"""
import enum
import logging
from datetime import datetime
from typing import Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from config import settings
from models.payment_claim import PaymentClaim
from models.sale import PaymentMethod, PriceType, Sale, SaleItem, SaleStatus, SaleStatusHistory
from models.users import User
from schemas.checkout import CheckoutRequest, CheckoutResult
from services.cart_validation import CartSnapshot, validate_cart
from services.errors import CheckoutError, MissingField, OrderFailed, OrderingDisabled, PaymentAlreadyUsed
from services.payment_verification import verify_payment
from services.stock_ledger import decrement_stock
from services.store_settings import get_store_settings
from services.tax import TaxCalculation, calculate_tax
from utils.audit import write_log

logger = logging.getLogger(__name__)


class CheckoutStage(str, enum.Enum):
    START = "START"
    CART_VALIDATED = "CART_VALIDATED"
    PAYMENT_VERIFIED = "PAYMENT_VERIFIED"
    STOCK_RESERVED = "STOCK_RESERVED"
    ORDER_RECORDED = "ORDER_RECORDED"
    CART_CLEARED = "CART_CLEARED"
    FAILED = "FAILED"


def _reserve_stock(db: Session, snapshot: CartSnapshot):
    # Ascending book id keeps lock order stable across concurrent checkouts
    for line in sorted(snapshot.valid_items, key=lambda v: v.item.book_id):
        decrement_stock(db, line.item.book_id, line.item.quantity)


def _create_sale(db: Session, snapshot: CartSnapshot, tax: TaxCalculation, checkout: CheckoutRequest,
                 customer: Optional[User], receipt_url: Optional[str]) -> Sale:
    actor_id = customer.id if customer else None
    sale = Sale(
        subtotal=snapshot.subtotal,
        tax_amount=tax.tax_amount,
        total_amount=tax.total_with_tax,
        currency=snapshot.currency,
        payment_method=checkout.payment_method,
        payment_transaction_id=checkout.payment_transaction_id,
        payment_receipt_url=receipt_url,
        customer_id=actor_id,
        customer_email=checkout.customer_email or (customer.email if customer else None),
        customer_name=checkout.customer_name or (customer.full_name if customer else None),
        status=SaleStatus.PENDING,
    )
    sale.items = [
        SaleItem(
            book_id=line.item.book_id,
            quantity=line.item.quantity,
            unit_price=line.unit_price,
            line_total=line.line_total,
            price_type=PriceType.MEMBER if line.item.is_member_price else PriceType.RETAIL,
        )
        for line in snapshot.valid_items
    ]
    sale.status_history = [SaleStatusHistory(status=SaleStatus.PENDING, note="Order placed", changed_by=actor_id)]
    if settings.ORDER_AUTO_COMPLETE:
        sale.status = SaleStatus.COMPLETED
        sale.status_history.append(
            SaleStatusHistory(status=SaleStatus.COMPLETED, note="Completed automatically at checkout", changed_by=actor_id)
        )

    db.add(sale)
    try:
        db.flush()
        if checkout.payment_method == PaymentMethod.CARD:
            claim = db.query(PaymentClaim).filter(
                PaymentClaim.transaction_id == checkout.payment_transaction_id
            ).first()
            if claim:
                claim.sale_id = sale.id
        db.commit()
    except IntegrityError as e:
        # payment_transaction_id is unique
        if checkout.payment_transaction_id:
            raise PaymentAlreadyUsed() from e
        logger.exception("Integrity error while recording order")
        raise OrderFailed() from e
    except SQLAlchemyError as e:
        logger.exception("Database error while recording order")
        raise OrderFailed() from e
    return sale


async def commit_order(db: Session, cart_store, checkout: CheckoutRequest, gateway,
                       customer: Optional[User] = None, now: Optional[datetime] = None,
                       ip: Optional[str] = None) -> CheckoutResult:
    stage = CheckoutStage.START
    is_card = checkout.payment_method == PaymentMethod.CARD
    try:
        store = get_store_settings(db)
        if not store.ordering_enabled:
            raise OrderingDisabled(store.ordering_disabled_message)
        if is_card and not checkout.payment_transaction_id:
            raise MissingField("Missing required field: payment_transaction_id")

        # Nothing has been written before this point, failures need no cleanup
        snapshot = validate_cart(db, cart_store.read_cart(), now)
        stage = CheckoutStage.CART_VALIDATED

        tax = calculate_tax(snapshot.subtotal, snapshot.currency)

        receipt_url = checkout.payment_receipt_url
        if is_card:
            verification = await verify_payment(
                db, gateway, checkout.payment_transaction_id, tax.total_with_tax, snapshot.currency
            )
            if not verification.valid:
                logger.info("Checkout failed at %s: %s", stage.value, verification.code)
                return CheckoutResult(
                    success=False,
                    code=verification.code,
                    error=f"Payment verification failed: {verification.error}",
                )
            receipt_url = verification.receipt_url or receipt_url
            stage = CheckoutStage.PAYMENT_VERIFIED

        try:
            _reserve_stock(db, snapshot)
            stage = CheckoutStage.STOCK_RESERVED
            sale = _create_sale(db, snapshot, tax, checkout, customer, receipt_url)
        except (CheckoutError, SQLAlchemyError) as e:
            db.rollback()
            if is_card:
                logger.error(
                    "Payment %s verified for %s %s but no order was recorded; reconciliation required",
                    checkout.payment_transaction_id, tax.total_with_tax, snapshot.currency,
                )
            if isinstance(e, CheckoutError):
                raise
            logger.exception("Database error while reserving stock")
            raise OrderFailed() from e
        stage = CheckoutStage.ORDER_RECORDED

    except CheckoutError as e:
        logger.info("Checkout failed at %s: %s", stage.value, e.code)
        return CheckoutResult(success=False, error=e.message, code=e.code)
    except SQLAlchemyError:
        # Reads before the stock write, or the payment claim insert
        db.rollback()
        logger.exception("Checkout failed at %s: database error", stage.value)
        return CheckoutResult(success=False, error=OrderFailed.default_message, code=OrderFailed.code)

    cart_store.clear_cart()
    stage = CheckoutStage.CART_CLEARED

    sale_id = sale.id
    warnings = snapshot.all_warnings
    try:
        write_log(
            db, user_id=customer.id if customer else None, action="CHECKOUT", resource="sales",
            status="SUCCESS", ip=ip,
            meta={
                "sale_id": sale_id,
                "total": str(tax.total_with_tax),
                "currency": snapshot.currency,
                "payment_method": checkout.payment_method.value,
                "warnings": warnings,
                "removed_items": snapshot.removed_items,
            },
        )
    except SQLAlchemyError as log_e:
        # The order exists; a missing audit row must not turn it into a failure
        db.rollback()
        logger.exception("Failed to write audit log for sale %s: %s", sale_id, log_e)

    logger.info("Checkout %s: sale %s recorded", stage.value, sale_id)
    return CheckoutResult(success=True, order_id=sale_id, warnings=warnings, removed_items=snapshot.removed_items)
