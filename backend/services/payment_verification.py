# backend/services/payment_verification.py
"""Confirm that a card payment taken client-side really paid for this cart.

Checks, in order: the transaction was never used before, the gateway knows
it, it is COMPLETED, the amount matches to the cent, the currency matches.
A transaction that passes is claimed immediately so it can't back a second
order.
"""
import logging
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

from sqlalchemy import exists, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from models.payment_claim import PaymentClaim
from models.sale import Sale
from services import errors

logger = logging.getLogger(__name__)

COMPLETED = "COMPLETED"


@dataclass
class PaymentVerification:
    valid: bool
    error: Optional[str] = None
    code: Optional[str] = None
    status: Optional[str] = None
    receipt_url: Optional[str] = None
    amount_minor_units: Optional[int] = None
    currency: Optional[str] = None


def _invalid(code, error, status=None) -> PaymentVerification:
    return PaymentVerification(valid=False, code=code, error=error, status=status)


def to_minor_units(amount) -> int:
    return int((Decimal(str(amount)) * 100).quantize(Decimal(1), rounding=ROUND_HALF_UP))


def is_transaction_used(db: Session, transaction_id: str) -> bool:
    stmt = select(or_(
        exists().where(Sale.payment_transaction_id == transaction_id),
        exists().where(PaymentClaim.transaction_id == transaction_id),
    ))
    return bool(db.execute(stmt).scalar())


async def verify_payment(db: Session, gateway, transaction_id: str,
                         expected_amount, expected_currency: str) -> PaymentVerification:
    # 1. Replayed transactions are refused without asking the gateway
    if is_transaction_used(db, transaction_id):
        return _invalid(errors.PaymentAlreadyUsed.code, errors.PaymentAlreadyUsed.default_message)

    # 2. Fetch; gateway internals never reach the caller
    try:
        payment = await gateway.get_payment(transaction_id)
    except Exception:
        logger.exception("Payment verification failed for transaction %s", transaction_id)
        return _invalid(errors.GATEWAY_ERROR, "Failed to verify payment")

    if payment is None:
        return _invalid(errors.PAYMENT_NOT_FOUND, "Payment not found")

    # 3. Only settled payments count
    if payment.status != COMPLETED:
        return _invalid(
            errors.PAYMENT_STATUS_INVALID,
            f"Payment status is {payment.status}, expected {COMPLETED}",
            status=payment.status,
        )

    # 4. Exact amount, no tolerance
    expected_minor = to_minor_units(expected_amount)
    if payment.amount_minor_units is None:
        return _invalid(errors.AMOUNT_MISMATCH, "Payment amount not found", status=payment.status)
    if payment.amount_minor_units != expected_minor:
        return _invalid(
            errors.AMOUNT_MISMATCH,
            f"Payment amount mismatch. Expected: {expected_minor} cents, "
            f"Got: {payment.amount_minor_units} cents",
            status=payment.status,
        )

    # 5. Currency must match even if the number does
    if (payment.currency or "") != expected_currency:
        return _invalid(
            errors.CURRENCY_MISMATCH,
            f"Currency mismatch. Expected: {expected_currency}, Got: {payment.currency or ''}",
            status=payment.status,
        )

    db.add(PaymentClaim(transaction_id=transaction_id))
    try:
        db.commit()
    except IntegrityError:
        # A concurrent checkout claimed it between our check and insert
        db.rollback()
        return _invalid(errors.PaymentAlreadyUsed.code, errors.PaymentAlreadyUsed.default_message)

    return PaymentVerification(
        valid=True,
        status=payment.status,
        receipt_url=payment.receipt_url,
        amount_minor_units=payment.amount_minor_units,
        currency=payment.currency,
    )
