"""Unit tests for settlement totals calculation"""

import pytest
from decimal import Decimal
from kasa_gateway.domain.exceptions import ValidationError
from kasa_gateway.domain.pricing import DEALER_PRICING, DESK_PRICING, PricingTable
from kasa_gateway.domain.totals import calculate_totals, round_money, to_decimal


def test_desk_totals_worked_example():
    """Test desk totals for top-ups and full-fare cards paid mostly by card"""
    totals = calculate_totals(
        DESK_PRICING,
        products={"dolum": 150, "tamKart": 20},
        category_credit_cards={"dolum": 3530, "kart": 0},
        payments={"gunbasiNakit": 720, "bankayaGonderilen": 0, "ertesiGuneBirakilan": 0},
    )

    assert totals.total_sales == 1150
    assert totals.total_credit_card == 3530
    assert totals.total_cash == -2380
    assert totals.cash_in_register == -1660
    # 1150 - (720 + 3530 + 0 + 0)
    assert totals.difference == -3100


def test_all_desk_products_priced():
    """Test every desk product code contributes quantity * unit price"""
    products = {
        "dolum": 10,
        "tamKart": 1,
        "indirimliKart": 1,
        "serbestKart": 1,
        "serbestVize": 1,
        "indirimliVize": 1,
        "kartKilifi": 1,
    }

    totals = calculate_totals(DESK_PRICING, products, {}, {})

    assert totals.total_sales == 10 + 50 + 100 + 100 + 75 + 25 + 10


def test_unknown_product_codes_ignored():
    """Test codes outside the price table add nothing"""
    totals = calculate_totals(DESK_PRICING, {"dolum": 5, "bilinmeyen": 1000}, {}, {})

    assert totals.total_sales == 5


def test_absent_sections_are_empty():
    """Test missing products, credit cards and payments count as zero"""
    totals = calculate_totals(DESK_PRICING, None, None, None)

    assert totals.as_dict() == {
        "totalSales": 0,
        "totalCreditCard": 0,
        "totalCash": 0,
        "cashInRegister": 0,
        "difference": 0,
    }


def test_balanced_day_has_zero_difference():
    """Test a day where sales are fully covered by cash movements and cards"""
    totals = calculate_totals(
        DESK_PRICING,
        products={"tamKart": 10},  # 500
        category_credit_cards={"kart": 200},
        payments={"gunbasiNakit": 0, "bankayaGonderilen": 250, "ertesiGuneBirakilan": 50},
    )

    assert totals.total_cash == 300
    assert totals.cash_in_register == 0
    assert totals.difference == 0


def test_dealer_excludes_vize_and_card_case_credit_cards():
    """Test dealer credit-card total only sums dolum and kart"""
    totals = calculate_totals(
        DEALER_PRICING,
        products={"bayiDolum": 100, "bayiTamKart": 2, "bayiKartKilifi": 1, "posRulosu": 4},
        category_credit_cards={"dolum": 40, "kart": 60, "vize": 999, "kartKilifi": 999},
        payments={},
    )

    assert totals.total_sales == 100 + 100 + 10 + 20
    assert totals.total_credit_card == 100
    assert totals.total_cash == 130


def test_dealer_ignores_desk_product_codes():
    """Test desk codes are not priced on dealer settlements"""
    totals = calculate_totals(DEALER_PRICING, {"dolum": 100, "tamKart": 3}, {}, {})

    assert totals.total_sales == 0


def test_fractional_amounts_rounded_once():
    """Test exact decimal arithmetic with a single half-up rounding"""
    totals = calculate_totals(
        DESK_PRICING,
        products={"dolum": 0.1},
        category_credit_cards={"dolum": 0.2, "kart": 0.005},
        payments={},
    )

    # 0.1 - 0.205 = -0.105 rounds half-up (away from zero) to -0.11
    assert totals.total_credit_card == 0.21
    assert totals.total_cash == -0.11


def test_negative_inputs_pass_through():
    """Test negative quantities are not rejected by the calculator"""
    totals = calculate_totals(DESK_PRICING, {"tamKart": -2}, {}, {"gunbasiNakit": -10})

    assert totals.total_sales == -100
    assert totals.cash_in_register == -110
    assert totals.difference == -90


def test_injected_price_table():
    """Test alternate price tables replace the defaults"""
    table = PricingTable(
        unit_prices={"dolum": Decimal("2")},
        credit_card_categories=("dolum",),
        banknote_categories=("dolum",),
    )

    totals = calculate_totals(table, {"dolum": 10, "tamKart": 5}, {"dolum": 3}, {})

    assert totals.total_sales == 20
    assert totals.total_cash == 17


@pytest.mark.parametrize(
    "value,expected",
    [(None, Decimal(0)), (True, Decimal(0)), (3, Decimal(3)), ("2.5", Decimal("2.5")), (0.1, Decimal("0.1"))],
)
def test_to_decimal(value, expected):
    """Test submitted numbers convert without float noise"""
    assert to_decimal(value) == expected


def test_round_money_half_up():
    """Test half-cent values round away from zero"""
    assert round_money(Decimal("2.345")) == 2.35
    assert round_money(Decimal("-2.345")) == -2.35


@pytest.mark.parametrize("value", ["abc", "", "12,5", float("inf"), float("nan"), "-Infinity"])
def test_to_decimal_rejects_non_numbers(value):
    """Test text and non-finite numbers are refused instead of stored"""
    with pytest.raises(ValidationError):
        to_decimal(value)


def test_non_numeric_product_quantity_rejected():
    """Test totals cannot be computed from a quantity that is not a number"""
    with pytest.raises(ValidationError):
        calculate_totals(DESK_PRICING, {"dolum": "on"}, {}, {})
