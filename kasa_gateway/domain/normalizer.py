"""Read-time upgrade of legacy settlement shapes.

Older records stored ``banknotes`` as one flat denomination map and had no
``bankSentCash`` at all. Current records keep banknotes per cash-handling
category. Everything handed to a caller goes through ``normalize_record`` so
both generations look the same; stored rows are never rewritten here.
"""

from dataclasses import replace
from typing import Any, Dict, Mapping, Optional, Sequence

from kasa_gateway.domain.banknotes import DENOMINATIONS, calculate_banknote_totals, empty_counts
from kasa_gateway.domain.models import SettlementRecord
from kasa_gateway.domain.pricing import PricingTable


def _counts(raw: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    raw = raw or {}
    return {code: raw.get(code) or 0 for code in DENOMINATIONS}


def _parse_categorized(
    raw: Mapping[str, Any], categories: Sequence[str]
) -> Optional[Dict[str, Dict[str, Any]]]:
    dolum = raw.get("dolum")
    if not isinstance(dolum, Mapping):
        return None
    return {
        category: _counts(raw.get(category) if isinstance(raw.get(category), Mapping) else None)
        for category in categories
    }


def _parse_legacy(
    raw: Mapping[str, Any], categories: Sequence[str]
) -> Dict[str, Dict[str, Any]]:
    # Flat counts were all top-up cash
    result = {category: empty_counts() for category in categories}
    result["dolum"] = _counts(raw)
    return result


def normalize_banknotes(
    banknotes: Optional[Mapping[str, Any]], categories: Sequence[str]
) -> Dict[str, Dict[str, Any]]:
    """Return banknotes in categorized shape, upgrading the flat legacy form."""
    if banknotes is None:
        return {category: empty_counts() for category in categories}
    categorized = _parse_categorized(banknotes, categories)
    if categorized is not None:
        return categorized
    return _parse_legacy(banknotes, categories)


def normalize_bank_sent_cash(
    bank_sent_cash: Optional[Mapping[str, Any]], categories: Sequence[str]
) -> Dict[str, Any]:
    """Backfill the per-category bank transfer figures and ``totalSent``."""
    bank_sent_cash = bank_sent_cash or {}
    result: Dict[str, Any] = {category: bank_sent_cash.get(category) or 0 for category in categories}
    result["totalSent"] = bank_sent_cash.get("totalSent") or 0
    return result


def normalize_record(record: SettlementRecord, pricing: PricingTable) -> SettlementRecord:
    """Copy of ``record`` with current-shape banknotes, bankSentCash and counted cash."""
    categories = pricing.banknote_categories
    banknotes = normalize_banknotes(record.banknotes, categories)
    return replace(
        record,
        banknotes=banknotes,
        bank_sent_cash=normalize_bank_sent_cash(record.bank_sent_cash, categories),
        banknote_totals=calculate_banknote_totals(banknotes, categories),
    )
