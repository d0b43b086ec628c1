"""Domain models - pure Python dataclasses representing business entities"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional


class SettlementKind(str, Enum):
    DESK = "desk"
    DEALER = "dealer"


class SettlementStatus(str, Enum):
    DRAFT = "draft"
    SUBMITTED = "submitted"
    APPROVED = "approved"
    REJECTED = "rejected"
    PENDING_REVISION = "pending_revision"
    REVISED = "revised"


class ReviewAction(str, Enum):
    APPROVE = "approve"
    REJECT = "reject"
    REVISE = "revise"


class Role(str, Enum):
    ADMIN = "admin"
    SUPERVISOR = "supervisor"
    RESPONSIBLE = "responsible"
    DESK = "desk"


class HakedisType(str, Enum):
    WEEKLY = "HAFTALIK"
    CREDIT_CARD = "KREDI_KARTI"


@dataclass
class Actor:
    """Authenticated caller resolved from the bearer token"""

    uid: str
    email: str
    role: str

    def has_role(self, *roles: Role) -> bool:
        return self.role in {r.value for r in roles}


@dataclass
class Totals:
    """Derived settlement figures, rounded to currency precision"""

    total_sales: float
    total_credit_card: float
    total_cash: float
    cash_in_register: float
    difference: float

    def as_dict(self) -> Dict[str, float]:
        return {
            "totalSales": self.total_sales,
            "totalCreditCard": self.total_credit_card,
            "totalCash": self.total_cash,
            "cashInRegister": self.cash_in_register,
            "difference": self.difference,
        }


@dataclass
class SettlementInput:
    """Figures submitted by a cashier or dealer for one business day"""

    date: str
    products: Dict[str, Any] = field(default_factory=dict)
    category_credit_cards: Dict[str, Any] = field(default_factory=dict)
    payments: Dict[str, Any] = field(default_factory=dict)
    banknotes: Optional[Dict[str, Any]] = None
    bank_sent_cash: Optional[Dict[str, Any]] = None


@dataclass
class SettlementRecord:
    """Stored desk or dealer settlement"""

    id: str
    kind: SettlementKind
    date: str
    status: SettlementStatus
    products: Dict[str, Any]
    category_credit_cards: Dict[str, Any]
    payments: Dict[str, Any]
    banknotes: Optional[Dict[str, Any]]
    bank_sent_cash: Optional[Dict[str, Any]]
    totals: Dict[str, float]
    submitted_by: str
    submitted_by_email: Optional[str] = None
    submitted_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    reviewed_by: Optional[str] = None
    reviewed_by_email: Optional[str] = None
    reviewed_by_role: Optional[str] = None
    reviewed_at: Optional[datetime] = None
    review_notes: Optional[str] = None
    review_action: Optional[str] = None
    banknote_totals: Optional[Dict[str, float]] = None


@dataclass
class Vehicle:
    """Fleet vehicle as seen by progress-payment distribution"""

    vehicle_number: int
    plate_number: Optional[str]
    route_name: Optional[str]
    iban: str = ""
    tax_id: str = ""


@dataclass
class ReportRow:
    """Per-vehicle share of a progress payment"""

    date: str
    vehicle_number: int
    plate_number: Optional[str]
    route_name: Optional[str]
    route_amount: float
    vehicle_amount: float
    total_amount: float
    type: str


@dataclass
class AmountBreakdown:
    route_amount: float = 0.0
    vehicle_amount: float = 0.0
    total_amount: float = 0.0


@dataclass
class VehicleWeeklySummary:
    """One vehicle's weekly and credit-card progress payments over a date range"""

    vehicle_number: int
    plate_number: Optional[str]
    route_name: Optional[str]
    iban: str
    tax_id: str
    haftalik: AmountBreakdown = field(default_factory=AmountBreakdown)
    kredi_karti: AmountBreakdown = field(default_factory=AmountBreakdown)
    grand_total: float = 0.0


@dataclass
class WeeklySummary:
    start_date: str
    end_date: str
    vehicles: List[VehicleWeeklySummary]
    total_haftalik: float
    total_kredi_karti: float
    grand_total: float
