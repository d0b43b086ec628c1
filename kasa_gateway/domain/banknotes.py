"""Banknote counting - physical cash value per cash-handling category"""

from decimal import Decimal
from typing import Any, Dict, Mapping, Optional, Sequence

from kasa_gateway.domain.totals import round_money, to_decimal

# Turkish lira notes and coins, largest first
DENOMINATIONS: Dict[str, Decimal] = {
    "b200": Decimal("200"),
    "b100": Decimal("100"),
    "b50": Decimal("50"),
    "b20": Decimal("20"),
    "b10": Decimal("10"),
    "b5": Decimal("5"),
    "c1": Decimal("1"),
    "c050": Decimal("0.50"),
}


def empty_counts() -> Dict[str, int]:
    return {code: 0 for code in DENOMINATIONS}


def count_value(counts: Optional[Mapping[str, Any]]) -> Decimal:
    """Cash value of a single denomination → count mapping"""
    if not counts:
        return Decimal(0)
    return sum(
        (to_decimal(counts.get(code)) * value for code, value in DENOMINATIONS.items()),
        Decimal(0),
    )


def calculate_banknote_totals(
    banknotes: Optional[Mapping[str, Any]],
    categories: Sequence[str],
) -> Dict[str, float]:
    """
    Value the counted cash of a settlement, per category and overall.

    Expects the categorized shape produced by the normalizer
    ({"dolum": {...}, "kart": {...}, "vize": {...}}). Categories missing
    from ``banknotes`` are valued at zero.

    Returns:
        {"dolum": .., "kart": .., ["vize": ..,] "total": ..}
    """
    banknotes = banknotes or {}
    result: Dict[str, float] = {}
    total = Decimal(0)
    for category in categories:
        value = count_value(banknotes.get(category))
        result[category] = round_money(value)
        total += value
    result["total"] = round_money(total)
    return result
