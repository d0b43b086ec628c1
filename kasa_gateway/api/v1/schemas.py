"""Pydantic schemas for API request/response validation"""

import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from kasa_gateway.domain.models import HakedisType, SettlementKind, SettlementStatus

DATE_PATTERN = r"^\d{4}-\d{2}-\d{2}$"


class CamelModel(BaseModel):
    """Accepts and emits camelCase keys; snake_case names work on input too"""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, from_attributes=True, allow_inf_nan=False
    )


# -- settlements -----------------------------------------------------------


class SettlementPayload(CamelModel):
    """Request body for desk and dealer save/submit/update"""

    date: str = Field(..., pattern=DATE_PATTERN, description="Business day, YYYY-MM-DD")
    products: Dict[str, float] = Field(default_factory=dict, description="Product code to quantity")
    category_credit_cards: Dict[str, float] = Field(default_factory=dict)
    payments: Dict[str, float] = Field(default_factory=dict)
    banknotes: Optional[Dict[str, Union[Dict[str, float], float]]] = Field(
        None, description="Category to denomination counts, or legacy flat denomination counts"
    )
    bank_sent_cash: Optional[Dict[str, float]] = None


class ReviewRequest(CamelModel):
    """Request body for PATCH .../review"""

    action: str = Field(..., description="approve | reject | revise")
    notes: Optional[str] = None


class TotalsSchema(CamelModel):
    total_sales: float
    total_credit_card: float
    total_cash: float
    cash_in_register: float
    difference: float


class SettlementResponse(CamelModel):
    id: str
    kind: SettlementKind
    date: str
    status: SettlementStatus
    products: Dict[str, Any]
    category_credit_cards: Dict[str, Any]
    payments: Dict[str, Any]
    banknotes: Optional[Dict[str, Any]] = None
    bank_sent_cash: Optional[Dict[str, Any]] = None
    banknote_totals: Optional[Dict[str, float]] = None
    totals: TotalsSchema
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


class DeletedResponse(CamelModel):
    id: str


# -- progress payments -----------------------------------------------------


class HakedisCreateRequest(CamelModel):
    date: str = Field(..., pattern=DATE_PATTERN)
    type: HakedisType
    routes: Dict[str, float] = Field(default_factory=dict, description="Route name to amount")
    vehicles: Dict[str, float] = Field(default_factory=dict, description="Vehicle number to amount")
    raporal: float = Field(..., description="Reported revenue")
    sistem: float = Field(..., description="System revenue")


class HakedisUpdateRequest(CamelModel):
    date: Optional[str] = Field(None, pattern=DATE_PATTERN)
    type: Optional[HakedisType] = None
    routes: Optional[Dict[str, float]] = None
    vehicles: Optional[Dict[str, float]] = None
    raporal: Optional[float] = None
    sistem: Optional[float] = None


class HakedisResponse(CamelModel):
    id: uuid.UUID
    date: str
    type: HakedisType
    routes: Dict[str, float]
    vehicles: Dict[str, float]
    raporal: float
    sistem: float
    difference: float
    created_by: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    report_count: Optional[int] = None


class AmountBreakdownSchema(CamelModel):
    route_amount: float
    vehicle_amount: float
    total_amount: float


class VehicleWeeklySchema(CamelModel):
    vehicle_number: int
    plate_number: Optional[str] = None
    route_name: Optional[str] = None
    iban: str
    tax_id: str
    haftalik: AmountBreakdownSchema
    kredi_karti: AmountBreakdownSchema
    grand_total: float


class WeeklyTotalsSchema(CamelModel):
    total_haftalik: float
    total_kredi_karti: float
    grand_total: float
    vehicle_count: int


class WeeklySummaryResponse(CamelModel):
    start_date: str
    end_date: str
    vehicles: List[VehicleWeeklySchema]
    summary: WeeklyTotalsSchema


# -- vehicles --------------------------------------------------------------


class VehicleCreateRequest(CamelModel):
    vehicle_number: int = Field(..., ge=0)
    plate_number: str = Field(..., min_length=1)
    route_name: Optional[str] = None
    driver_name: Optional[str] = None
    owner_name: Optional[str] = None
    iban: Optional[str] = None
    tax_id: Optional[str] = None
    contact_info: Optional[str] = None


class VehicleResponse(CamelModel):
    id: uuid.UUID
    vehicle_number: int
    plate_number: str
    route_name: Optional[str] = None
    driver_name: Optional[str] = None
    owner_name: Optional[str] = None
    iban: Optional[str] = None
    tax_id: Optional[str] = None
    contact_info: Optional[str] = None
    created_at: datetime
    updated_at: datetime


# -- leave -----------------------------------------------------------------


class EmployeeCreateRequest(CamelModel):
    first_name: str = Field(..., min_length=1)
    last_name: str = Field(..., min_length=1)
    tc_no: str = Field(..., min_length=1, description="National identity number")
    email: str = ""
    phone: str = ""
    department: str = ""
    position: str = ""
    start_date: str = Field(..., pattern=DATE_PATTERN, description="Employment start date")


class EmployeeResponse(CamelModel):
    id: uuid.UUID
    first_name: str
    last_name: str
    tc_no: str
    email: str
    phone: str
    department: str
    position: str
    start_date: str
    is_active: bool


class LeaveRequestCreate(CamelModel):
    employee_id: str
    leave_type: str = Field(..., min_length=1, description="annual, sick, unpaid, ...")
    start_date: str = Field(..., pattern=DATE_PATTERN)
    end_date: str = Field(..., pattern=DATE_PATTERN)
    description: Optional[str] = None


class LeaveReviewRequest(CamelModel):
    action: str = Field(..., description="approve | reject")
    notes: Optional[str] = None


class LeaveRequestResponse(CamelModel):
    id: uuid.UUID
    employee_id: uuid.UUID
    leave_type: str
    start_date: str
    end_date: str
    total_days: int
    status: str
    description: str
    reviewed_by: Optional[str] = None
    reviewed_by_email: Optional[str] = None
    review_notes: Optional[str] = None
    reviewed_at: Optional[datetime] = None
    requested_at: datetime


class LeaveEntitlementResponse(CamelModel):
    id: uuid.UUID
    employee_id: uuid.UUID
    year: int
    total_days: int
    used_days: int
    remaining_days: int
