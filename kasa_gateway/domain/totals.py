"""Settlement totals calculation - core reconciliation arithmetic"""

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Mapping, Optional

from kasa_gateway.domain.exceptions import ValidationError
from kasa_gateway.domain.models import Totals
from kasa_gateway.domain.pricing import PricingTable

CENT = Decimal("0.01")


def to_decimal(value: Any) -> Decimal:
    """Convert a submitted number to Decimal; absent values count as zero."""
    if value is None or isinstance(value, bool):
        return Decimal(0)
    try:
        number = Decimal(str(value))
    except InvalidOperation:
        raise ValidationError(f"'{value}' is not a number")
    if not number.is_finite():
        raise ValidationError(f"'{value}' is not a finite number")
    return number


def round_money(value: Decimal) -> float:
    return float(value.quantize(CENT, rounding=ROUND_HALF_UP))


def calculate_totals(
    pricing: PricingTable,
    products: Optional[Mapping[str, Any]],
    category_credit_cards: Optional[Mapping[str, Any]],
    payments: Optional[Mapping[str, Any]],
) -> Totals:
    """
    Derive sales, credit-card and cash figures from a settlement submission.

    Formulas:
    - totalSales      = sum(quantity * unit price) over the kind's products
    - totalCreditCard = sum of credit-card amounts over the kind's categories
    - totalCash       = totalSales - totalCreditCard
    - cashInRegister  = gunbasiNakit + totalSales - (totalCreditCard + bankayaGonderilen + ertesiGuneBirakilan)
    - difference      = totalSales - (gunbasiNakit + totalCreditCard + bankayaGonderilen + ertesiGuneBirakilan)

    Arithmetic is exact; each figure is rounded to 2 decimals once, at the end.
    Inputs are not validated here: negative and fractional values pass through.

    Example (desk prices):
        products={"dolum": 150, "tamKart": 20}, credit cards={"dolum": 3530},
        payments={"gunbasiNakit": 720}
        → totalSales=1150, totalCreditCard=3530, totalCash=-2380,
          cashInRegister=-1660, difference=-3100
    """
    products = products or {}
    category_credit_cards = category_credit_cards or {}
    payments = payments or {}

    total_sales = sum(
        (to_decimal(products.get(code)) * price for code, price in pricing.unit_prices.items()),
        Decimal(0),
    )
    total_credit_card = sum(
        (to_decimal(category_credit_cards.get(c)) for c in pricing.credit_card_categories),
        Decimal(0),
    )

    opening_cash = to_decimal(payments.get("gunbasiNakit"))
    sent_to_bank = to_decimal(payments.get("bankayaGonderilen"))
    carried_over = to_decimal(payments.get("ertesiGuneBirakilan"))

    total_cash = total_sales - total_credit_card
    cash_in_register = opening_cash + total_sales - (total_credit_card + sent_to_bank + carried_over)
    difference = total_sales - (opening_cash + total_credit_card + sent_to_bank + carried_over)

    return Totals(
        total_sales=round_money(total_sales),
        total_credit_card=round_money(total_credit_card),
        total_cash=round_money(total_cash),
        cash_in_register=round_money(cash_in_register),
        difference=round_money(difference),
    )
