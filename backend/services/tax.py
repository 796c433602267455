# backend/services/tax.py
"""Tax rates by currency.

The same function prices the expected card charge and the recorded sale,
so both always agree to the cent.
"""
from decimal import Decimal, ROUND_HALF_UP
from typing import NamedTuple

CENT = Decimal("0.01")

TAX_RATES = {
    "AUD": (Decimal("0.10"), "GST (10%)"),
    "USD": (Decimal("0.00"), "No sales tax (varies by state)"),
    "EUR": (Decimal("0.00"), "VAT (varies by country)"),
    "GBP": (Decimal("0.20"), "VAT (20%)"),
}
NO_TAX = (Decimal("0.00"), "No tax configured")


class TaxCalculation(NamedTuple):
    tax_rate: Decimal
    tax_amount: Decimal
    total_with_tax: Decimal
    tax_description: str


def to_money(value) -> Decimal:
    # str() first so floats like 0.1 don't drag binary noise along
    return Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)


def calculate_tax(subtotal, currency: str) -> TaxCalculation:
    rate, description = TAX_RATES.get(currency, NO_TAX)
    subtotal = to_money(subtotal)
    tax_amount = (subtotal * rate).quantize(CENT, rounding=ROUND_HALF_UP)
    return TaxCalculation(
        tax_rate=rate,
        tax_amount=tax_amount,
        total_with_tax=subtotal + tax_amount,
        tax_description=description,
    )


def get_tax_rate(currency: str) -> Decimal:
    return TAX_RATES.get(currency, NO_TAX)[0]


def has_tax(currency: str) -> bool:
    return get_tax_rate(currency) > 0


def format_tax_rate(currency: str) -> str:
    return f"{get_tax_rate(currency) * 100:.0f}%"
