"""Tests for the currency tax table."""

from decimal import Decimal

import pytest
from services.tax import calculate_tax, format_tax_rate, get_tax_rate, has_tax


class TestCalculateTax:
    def test_aud_gst(self):
        result = calculate_tax(Decimal("25.00"), "AUD")
        assert result.tax_rate == Decimal("0.10")
        assert result.tax_amount == Decimal("2.50")
        assert result.total_with_tax == Decimal("27.50")
        assert result.tax_description == "GST (10%)"

    def test_gbp_vat(self):
        result = calculate_tax(Decimal("10.00"), "GBP")
        assert result.tax_amount == Decimal("2.00")
        assert result.total_with_tax == Decimal("12.00")
        assert result.tax_description == "VAT (20%)"

    def test_zero_rate_currency(self):
        result = calculate_tax(Decimal("10.00"), "USD")
        assert result.tax_amount == Decimal("0.00")
        assert result.total_with_tax == Decimal("10.00")

    def test_unknown_currency_falls_back_to_no_tax(self):
        result = calculate_tax(Decimal("10.00"), "JPY")
        assert result.tax_rate == Decimal("0")
        assert result.total_with_tax == Decimal("10.00")
        assert result.tax_description == "No tax configured"

    def test_accepts_floats_without_binary_noise(self):
        assert calculate_tax(0.1 + 0.2, "AUD").total_with_tax == Decimal("0.33")

    def test_tax_rounds_half_up_to_cents(self):
        # 0.05 * 10% = 0.005
        assert calculate_tax(Decimal("0.05"), "AUD").tax_amount == Decimal("0.01")

    @pytest.mark.parametrize("currency", ["AUD", "GBP", "USD", "EUR", "NZD"])
    @pytest.mark.parametrize("subtotal", ["0", "0.01", "0.05", "19.99", "25.00", "123.45", "9999.99"])
    def test_total_minus_tax_is_subtotal(self, subtotal, currency):
        result = calculate_tax(Decimal(subtotal), currency)
        assert result.total_with_tax - result.tax_amount == Decimal(subtotal)


class TestHelpers:
    def test_get_tax_rate(self):
        assert get_tax_rate("GBP") == Decimal("0.20")
        assert get_tax_rate("XYZ") == Decimal("0")

    def test_has_tax(self):
        assert has_tax("AUD")
        assert not has_tax("USD")

    def test_format_tax_rate(self):
        assert format_tax_rate("AUD") == "10%"
        assert format_tax_rate("EUR") == "0%"
