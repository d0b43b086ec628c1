"""Unit price tables and category sets for desk and dealer settlements"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, Tuple

from kasa_gateway.domain.models import SettlementKind


@dataclass(frozen=True)
class PricingTable:
    """Prices and cash-handling categories that apply to one settlement kind"""

    unit_prices: Dict[str, Decimal]
    credit_card_categories: Tuple[str, ...]
    banknote_categories: Tuple[str, ...]


DESK_PRICING = PricingTable(
    unit_prices={
        "dolum": Decimal("1"),
        "tamKart": Decimal("50"),
        "indirimliKart": Decimal("100"),
        "serbestKart": Decimal("100"),
        "serbestVize": Decimal("75"),
        "indirimliVize": Decimal("25"),
        "kartKilifi": Decimal("10"),
    },
    credit_card_categories=("dolum", "kart", "vize", "kartKilifi"),
    banknote_categories=("dolum", "kart", "vize"),
)

# Dealers sell no subscription (vize) products
DEALER_PRICING = PricingTable(
    unit_prices={
        "bayiDolum": Decimal("1"),
        "bayiTamKart": Decimal("50"),
        "bayiKartKilifi": Decimal("10"),
        "posRulosu": Decimal("5"),
    },
    credit_card_categories=("dolum", "kart"),
    banknote_categories=("dolum", "kart"),
)


@dataclass(frozen=True)
class PricingConfig:
    """Process-wide pricing, read-only after startup"""

    desk: PricingTable = field(default=DESK_PRICING)
    dealer: PricingTable = field(default=DEALER_PRICING)

    def for_kind(self, kind: SettlementKind) -> PricingTable:
        return self.desk if kind == SettlementKind.DESK else self.dealer


DEFAULT_PRICING = PricingConfig()
