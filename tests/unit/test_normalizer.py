"""Unit tests for legacy record upgrade and banknote valuation"""

import pytest
from kasa_gateway.domain.banknotes import DENOMINATIONS, calculate_banknote_totals, count_value, empty_counts
from kasa_gateway.domain.exceptions import ValidationError
from kasa_gateway.domain.models import SettlementKind, SettlementRecord, SettlementStatus
from kasa_gateway.domain.normalizer import normalize_bank_sent_cash, normalize_banknotes, normalize_record
from kasa_gateway.domain.pricing import DEALER_PRICING, DESK_PRICING

DESK_CATEGORIES = DESK_PRICING.banknote_categories
DEALER_CATEGORIES = DEALER_PRICING.banknote_categories


def _record(**overrides) -> SettlementRecord:
    fields = dict(
        id="rec-1",
        kind=SettlementKind.DESK,
        date="2024-03-01",
        status=SettlementStatus.SUBMITTED,
        products={},
        category_credit_cards={},
        payments={},
        banknotes=None,
        bank_sent_cash=None,
        totals={},
        submitted_by="desk-1",
    )
    fields.update(overrides)
    return SettlementRecord(**fields)


def test_legacy_flat_banknotes_become_dolum():
    """Test flat denomination counts are moved under dolum"""
    result = normalize_banknotes({"b200": 2, "b100": 1}, DESK_CATEGORIES)

    assert result["dolum"]["b200"] == 2
    assert result["dolum"]["b100"] == 1
    assert result["dolum"]["c050"] == 0
    assert result["kart"] == empty_counts()
    assert result["vize"] == empty_counts()


def test_legacy_flat_banknotes_dealer_has_no_vize():
    """Test dealer upgrade only synthesizes dolum and kart"""
    result = normalize_banknotes({"b50": 4}, DEALER_CATEGORIES)

    assert set(result) == {"dolum", "kart"}
    assert result["dolum"]["b50"] == 4


def test_missing_banknotes_synthesized_with_zeros():
    """Test absent banknotes yield zero counts for every category"""
    result = normalize_banknotes(None, DESK_CATEGORIES)

    assert set(result) == {"dolum", "kart", "vize"}
    assert all(count == 0 for counts in result.values() for count in counts.values())


def test_categorized_banknotes_filled():
    """Test missing categories and denominations are filled with zero"""
    result = normalize_banknotes({"dolum": {"b5": 3}}, DESK_CATEGORIES)

    assert result["dolum"]["b5"] == 3
    assert set(result["dolum"]) == set(DENOMINATIONS)
    assert result["vize"] == empty_counts()


def test_normalize_banknotes_idempotent():
    """Test normalizing already-normalized banknotes changes nothing"""
    once = normalize_banknotes({"b200": 2, "b100": 1}, DESK_CATEGORIES)
    twice = normalize_banknotes(once, DESK_CATEGORIES)

    assert twice == once


def test_bank_sent_cash_backfilled():
    """Test absent bankSentCash gets zero per category plus totalSent"""
    assert normalize_bank_sent_cash(None, DESK_CATEGORIES) == {"dolum": 0, "kart": 0, "vize": 0, "totalSent": 0}
    assert normalize_bank_sent_cash(None, DEALER_CATEGORIES) == {"dolum": 0, "kart": 0, "totalSent": 0}


def test_bank_sent_cash_keeps_declared_values():
    """Test declared amounts survive and missing keys are filled"""
    result = normalize_bank_sent_cash({"dolum": 150, "totalSent": 150}, DESK_CATEGORIES)

    assert result == {"dolum": 150, "kart": 0, "vize": 0, "totalSent": 150}


def test_normalize_record_does_not_mutate_input():
    """Test the stored record is left untouched"""
    record = _record(banknotes={"b200": 1})

    normalized = normalize_record(record, DESK_PRICING)

    assert record.banknotes == {"b200": 1}
    assert record.bank_sent_cash is None
    assert normalized.banknotes["dolum"]["b200"] == 1
    assert normalized.bank_sent_cash["totalSent"] == 0


def test_normalize_record_values_counted_cash():
    """Test banknote totals are computed per category"""
    record = _record(banknotes={"dolum": {"b200": 2, "c050": 3}, "kart": {"b10": 1}})

    normalized = normalize_record(record, DESK_PRICING)

    assert normalized.banknote_totals == {"dolum": 401.5, "kart": 10, "vize": 0, "total": 411.5}


def test_count_value():
    """Test denomination values including the half-lira coin"""
    assert float(count_value({"b100": 1, "b5": 2, "c1": 3, "c050": 1})) == 113.5
    assert count_value(None) == 0


def test_banknote_totals_missing_category_is_zero():
    """Test categories absent from the counts value at zero"""
    totals = calculate_banknote_totals({"dolum": {"b20": 1}}, DEALER_CATEGORIES)

    assert totals == {"dolum": 20, "kart": 0, "total": 20}


def test_banknote_totals_reject_non_numeric_count():
    """Test a count that is not a number fails validation rather than valuing silently"""
    banknotes = normalize_banknotes({"dolum": {"b200": "abc"}}, DESK_CATEGORIES)

    with pytest.raises(ValidationError):
        calculate_banknote_totals(banknotes, DESK_CATEGORIES)
