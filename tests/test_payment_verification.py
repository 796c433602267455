"""Tests for card payment verification and the Square client."""

import asyncio
from decimal import Decimal

import httpx
import pytest

from conftest import FakeGateway, payment
from models.payment_claim import PaymentClaim
from models.sale import PaymentMethod, Sale
from services.payment_verification import to_minor_units, verify_payment
from utils.square_client import SquareClient


def verify(db, gateway, tx="pay-1", amount=Decimal("27.50"), currency="AUD"):
    return asyncio.run(verify_payment(db, gateway, tx, amount, currency))


class TestVerifyPayment:
    def test_accepts_exact_amount(self, db):
        gateway = FakeGateway([payment("pay-1", 2750)])
        result = verify(db, gateway)

        assert result.valid
        assert result.status == "COMPLETED"
        assert result.receipt_url.endswith("pay-1")
        assert result.amount_minor_units == 2750

    def test_rejects_pre_tax_amount(self, db):
        # 25.00 subtotal + 10% GST is 27.50, a 2500 charge skipped the tax
        gateway = FakeGateway([payment("pay-1", 2500)])
        result = verify(db, gateway)

        assert not result.valid
        assert result.code == "AMOUNT_MISMATCH"
        assert "Expected: 2750 cents, Got: 2500 cents" in result.error

    def test_rejects_overpayment(self, db):
        result = verify(db, FakeGateway([payment("pay-1", 2751)]))
        assert result.code == "AMOUNT_MISMATCH"

    def test_missing_amount(self, db):
        result = verify(db, FakeGateway([payment("pay-1", None)]))
        assert result.code == "AMOUNT_MISMATCH"
        assert result.error == "Payment amount not found"

    def test_pending_status_is_surfaced(self, db):
        result = verify(db, FakeGateway([payment("pay-1", 2750, status="PENDING")]))

        assert not result.valid
        assert result.code == "PAYMENT_STATUS_INVALID"
        assert result.status == "PENDING"

    @pytest.mark.parametrize("status", ["FAILED", "CANCELED", "APPROVED"])
    def test_other_non_terminal_statuses(self, db, status):
        result = verify(db, FakeGateway([payment("pay-1", 2750, status=status)]))
        assert result.status == status
        assert not result.valid

    def test_currency_mismatch_with_matching_amount(self, db):
        result = verify(db, FakeGateway([payment("pay-1", 2750, currency="USD")]))

        assert not result.valid
        assert result.code == "CURRENCY_MISMATCH"

    def test_unknown_payment(self, db):
        result = verify(db, FakeGateway([]))
        assert result.code == "PAYMENT_NOT_FOUND"
        assert result.error == "Payment not found"

    def test_gateway_errors_are_opaque(self, db):
        gateway = FakeGateway(error=RuntimeError("upstream said: secret internals"))
        result = verify(db, gateway)

        assert not result.valid
        assert result.code == "GATEWAY_ERROR"
        assert result.error == "Failed to verify payment"

    def test_transaction_on_existing_sale_skips_gateway(self, db):
        db.add(Sale(
            subtotal=Decimal("25.00"), tax_amount=Decimal("2.50"), total_amount=Decimal("27.50"),
            currency="AUD", payment_method=PaymentMethod.CARD, payment_transaction_id="pay-1",
        ))
        db.commit()
        gateway = FakeGateway([payment("pay-1", 2750)])

        result = verify(db, gateway)

        assert result.code == "PAYMENT_ALREADY_USED"
        assert "already been used" in result.error
        assert gateway.calls == []

    def test_second_verification_is_rejected_even_without_order(self, db):
        gateway = FakeGateway([payment("pay-1", 2750)])

        first = verify(db, gateway)
        second = verify(db, gateway)

        assert first.valid
        assert not second.valid
        assert "already been used" in second.error
        assert gateway.calls == ["pay-1"]
        assert db.query(PaymentClaim).filter_by(transaction_id="pay-1").count() == 1

    def test_failed_verification_does_not_claim(self, db):
        verify(db, FakeGateway([payment("pay-1", 2500)]))
        assert db.query(PaymentClaim).count() == 0

    def test_to_minor_units(self):
        assert to_minor_units(Decimal("27.50")) == 2750
        assert to_minor_units(19.99) == 1999
        assert to_minor_units(Decimal("0.005")) == 1


def _square(handler, **kwargs):
    return SquareClient(access_token="sq-token", environment="sandbox",
                        transport=httpx.MockTransport(handler), **kwargs)


class TestSquareClient:
    def test_parses_payment(self):
        seen = {}

        def handler(request):
            seen["url"] = str(request.url)
            seen["auth"] = request.headers["Authorization"]
            return httpx.Response(200, json={"payment": {
                "id": "pay-9", "status": "COMPLETED",
                "amount_money": {"amount": 2750, "currency": "AUD"},
                "receipt_url": "https://squareup.com/receipt/preview/pay-9",
            }})

        result = asyncio.run(_square(handler).get_payment("pay-9"))

        assert seen["url"] == "https://connect.squareupsandbox.com/v2/payments/pay-9"
        assert seen["auth"] == "Bearer sq-token"
        assert result.amount_minor_units == 2750
        assert result.currency == "AUD"
        assert result.status == "COMPLETED"

    def test_not_found_is_none(self):
        client = _square(lambda request: httpx.Response(404, json={"errors": []}))
        assert asyncio.run(client.get_payment("nope")) is None

    def test_server_error_raises(self):
        client = _square(lambda request: httpx.Response(500, json={"errors": ["boom"]}))
        with pytest.raises(httpx.HTTPStatusError):
            asyncio.run(client.get_payment("pay-1"))

    def test_production_host(self):
        assert SquareClient(environment="production").api_url == "https://connect.squareup.com"

    def test_timeout_fails_verification(self, db):
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        result = verify(db, _square(handler))
        assert result.code == "GATEWAY_ERROR"
        assert result.error == "Failed to verify payment"
