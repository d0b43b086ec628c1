"""Data access layer for settlements, progress payments, fleet and leave"""

import uuid
from typing import Any, Iterable, List, Optional, Sequence

from sqlalchemy import select
from sqlalchemy.orm import Session

from kasa_gateway.domain.models import (
    ReportRow,
    SettlementKind,
    SettlementRecord,
    SettlementStatus,
    Vehicle,
)
from kasa_gateway.domain.workflow import ACTIVE_STATUSES
from kasa_gateway.infrastructure.database.models import (
    EmployeeRow,
    HakedisRow,
    LeaveEntitlementRow,
    LeaveRequestRow,
    ReportRowModel,
    SettlementRecordRow,
    VehicleRow,
)


def parse_id(value: Any) -> Optional[uuid.UUID]:
    """Parse a path identifier; malformed ids simply match nothing"""
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except ValueError:
        return None


def _to_record(row: SettlementRecordRow) -> SettlementRecord:
    return SettlementRecord(
        id=str(row.id),
        kind=SettlementKind(row.kind),
        date=row.date,
        status=SettlementStatus(row.status),
        products=row.products or {},
        category_credit_cards=row.category_credit_cards or {},
        payments=row.payments or {},
        banknotes=row.banknotes,
        bank_sent_cash=row.bank_sent_cash,
        totals=row.totals or {},
        submitted_by=row.submitted_by,
        submitted_by_email=row.submitted_by_email,
        submitted_at=row.submitted_at,
        created_at=row.created_at,
        updated_at=row.updated_at,
        reviewed_by=row.reviewed_by,
        reviewed_by_email=row.reviewed_by_email,
        reviewed_by_role=row.reviewed_by_role,
        reviewed_at=row.reviewed_at,
        review_notes=row.review_notes,
        review_action=row.review_action,
    )


class SettlementRepository:
    """Repository for desk and dealer settlements"""

    def __init__(self, db: Session):
        self.db = db

    def _row(self, record_id: Any) -> Optional[SettlementRecordRow]:
        key = parse_id(record_id)
        if key is None:
            return None
        return self.db.get(SettlementRecordRow, key)

    def create(self, **fields: Any) -> SettlementRecord:
        """Insert a settlement and flush to obtain its id without committing"""
        row = SettlementRecordRow(**fields)
        self.db.add(row)
        self.db.flush()
        return _to_record(row)

    def get(self, record_id: Any) -> Optional[SettlementRecord]:
        row = self._row(record_id)
        return _to_record(row) if row else None

    def update(self, record_id: Any, **changes: Any) -> SettlementRecord:
        row = self._row(record_id)
        for name, value in changes.items():
            setattr(row, name, value)
        self.db.flush()
        return _to_record(row)

    def delete(self, record_id: Any) -> None:
        row = self._row(record_id)
        if row is not None:
            self.db.delete(row)
            self.db.flush()

    def find_draft(self, kind: SettlementKind, submitted_by: str, date: str) -> Optional[SettlementRecord]:
        row = self.db.scalars(
            select(SettlementRecordRow).where(
                SettlementRecordRow.kind == kind.value,
                SettlementRecordRow.submitted_by == submitted_by,
                SettlementRecordRow.date == date,
                SettlementRecordRow.status == SettlementStatus.DRAFT.value,
            )
        ).first()
        return _to_record(row) if row else None

    def has_active(self, kind: SettlementKind, submitted_by: str, date: str) -> bool:
        """True when a submitted, approved or revised record exists for the key"""
        row = self.db.scalars(
            select(SettlementRecordRow.id).where(
                SettlementRecordRow.kind == kind.value,
                SettlementRecordRow.submitted_by == submitted_by,
                SettlementRecordRow.date == date,
                SettlementRecordRow.status.in_([s.value for s in ACTIVE_STATUSES]),
            )
        ).first()
        return row is not None

    def list(
        self,
        kind: SettlementKind,
        submitted_by: Optional[str] = None,
        statuses: Optional[Sequence[SettlementStatus]] = None,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
    ) -> List[SettlementRecord]:
        """Fetch settlements newest business date first; date bounds are inclusive"""
        query = select(SettlementRecordRow).where(SettlementRecordRow.kind == kind.value)
        if submitted_by is not None:
            query = query.where(SettlementRecordRow.submitted_by == submitted_by)
        if statuses is not None:
            query = query.where(SettlementRecordRow.status.in_([s.value for s in statuses]))
        if start_date:
            query = query.where(SettlementRecordRow.date >= start_date)
        if end_date:
            query = query.where(SettlementRecordRow.date <= end_date)
        query = query.order_by(SettlementRecordRow.date.desc(), SettlementRecordRow.created_at.desc())
        return [_to_record(row) for row in self.db.scalars(query)]


class VehicleRepository:
    """Repository for fleet vehicles"""

    def __init__(self, db: Session):
        self.db = db

    def create(self, **fields: Any) -> VehicleRow:
        row = VehicleRow(**fields)
        self.db.add(row)
        self.db.flush()
        return row

    def get(self, vehicle_id: Any) -> Optional[VehicleRow]:
        key = parse_id(vehicle_id)
        return self.db.get(VehicleRow, key) if key else None

    def get_by_plate(self, plate_number: str) -> Optional[VehicleRow]:
        return self.db.scalars(select(VehicleRow).where(VehicleRow.plate_number == plate_number)).first()

    def get_by_number(self, vehicle_number: int) -> Optional[VehicleRow]:
        return self.db.scalars(select(VehicleRow).where(VehicleRow.vehicle_number == vehicle_number)).first()

    def list(self) -> List[VehicleRow]:
        return list(self.db.scalars(select(VehicleRow).order_by(VehicleRow.created_at.desc())))

    def fleet(self) -> List[Vehicle]:
        """All vehicles as domain objects for payment distribution"""
        return [
            Vehicle(
                vehicle_number=row.vehicle_number,
                plate_number=row.plate_number,
                route_name=row.route_name,
                iban=row.iban or "",
                tax_id=row.tax_id or "",
            )
            for row in self.db.scalars(select(VehicleRow))
        ]


class HakedisRepository:
    """Repository for progress payments and their report rows"""

    def __init__(self, db: Session):
        self.db = db

    def create(self, report_rows: Iterable[ReportRow], **fields: Any) -> HakedisRow:
        """Add a progress payment together with its report rows (flushed, not committed)"""
        hakedis = HakedisRow(**fields)
        self.db.add(hakedis)
        self.db.flush()

        for report in report_rows:
            self.db.add(
                ReportRowModel(
                    hakedis_id=hakedis.id,
                    date=report.date,
                    vehicle_number=report.vehicle_number,
                    plate_number=report.plate_number,
                    route_name=report.route_name,
                    route_amount=report.route_amount,
                    vehicle_amount=report.vehicle_amount,
                    total_amount=report.total_amount,
                    type=report.type,
                )
            )
        self.db.flush()
        return hakedis

    def get(self, hakedis_id: Any) -> Optional[HakedisRow]:
        key = parse_id(hakedis_id)
        return self.db.get(HakedisRow, key) if key else None

    def list(
        self,
        hakedis_type: Optional[str] = None,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
    ) -> List[HakedisRow]:
        query = select(HakedisRow)
        if hakedis_type:
            query = query.where(HakedisRow.type == hakedis_type)
        if start_date:
            query = query.where(HakedisRow.date >= start_date)
        if end_date:
            query = query.where(HakedisRow.date <= end_date)
        return list(self.db.scalars(query.order_by(HakedisRow.date.desc())))

    def delete(self, hakedis: HakedisRow) -> None:
        """Remove a progress payment; its report rows go with it"""
        self.db.delete(hakedis)
        self.db.flush()

    def reports_between(self, start_date: str, end_date: str) -> List[ReportRow]:
        rows = self.db.scalars(
            select(ReportRowModel).where(ReportRowModel.date >= start_date, ReportRowModel.date <= end_date)
        )
        return [
            ReportRow(
                date=r.date,
                vehicle_number=r.vehicle_number,
                plate_number=r.plate_number,
                route_name=r.route_name,
                route_amount=r.route_amount,
                vehicle_amount=r.vehicle_amount,
                total_amount=r.total_amount,
                type=r.type,
            )
            for r in rows
        ]

    def count_reports(self, hakedis_id: Any) -> int:
        key = parse_id(hakedis_id)
        return len(self.db.scalars(select(ReportRowModel.id).where(ReportRowModel.hakedis_id == key)).all())


class LeaveRepository:
    """Repository for employees, leave entitlements and leave requests"""

    def __init__(self, db: Session):
        self.db = db

    def add(self, row: Any) -> Any:
        self.db.add(row)
        self.db.flush()
        return row

    def get_employee(self, employee_id: Any) -> Optional[EmployeeRow]:
        key = parse_id(employee_id)
        return self.db.get(EmployeeRow, key) if key else None

    def get_employee_by_tc_no(self, tc_no: str) -> Optional[EmployeeRow]:
        return self.db.scalars(select(EmployeeRow).where(EmployeeRow.tc_no == tc_no)).first()

    def request_for_update(self, request_id: Any) -> Optional[LeaveRequestRow]:
        """Leave request locked until the transaction ends, read fresh from the store"""
        key = parse_id(request_id)
        if key is None:
            return None
        return self.db.scalars(
            select(LeaveRequestRow)
            .where(LeaveRequestRow.id == key)
            .with_for_update()
            .execution_options(populate_existing=True)
        ).first()

    def entitlement_for_update(self, employee_id: uuid.UUID, year: int) -> Optional[LeaveEntitlementRow]:
        """Current-year balance, row-locked until the transaction ends (ignored by SQLite)"""
        return self.db.scalars(
            select(LeaveEntitlementRow)
            .where(LeaveEntitlementRow.employee_id == employee_id, LeaveEntitlementRow.year == year)
            .with_for_update()
        ).first()

    def entitlements(self, employee_id: Any, year: Optional[int] = None) -> List[LeaveEntitlementRow]:
        key = parse_id(employee_id)
        if key is None:
            return []
        query = select(LeaveEntitlementRow).where(LeaveEntitlementRow.employee_id == key)
        if year is not None:
            query = query.where(LeaveEntitlementRow.year == year)
        return list(self.db.scalars(query.order_by(LeaveEntitlementRow.year.desc())))

    def open_requests(self, employee_id: uuid.UUID, statuses: Sequence[str]) -> List[LeaveRequestRow]:
        return list(
            self.db.scalars(
                select(LeaveRequestRow).where(
                    LeaveRequestRow.employee_id == employee_id,
                    LeaveRequestRow.status.in_(list(statuses)),
                )
            )
        )

    def list_requests(
        self,
        employee_id: Optional[Any] = None,
        status: Optional[str] = None,
        year: Optional[int] = None,
    ) -> List[LeaveRequestRow]:
        query = select(LeaveRequestRow)
        if employee_id is not None:
            query = query.where(LeaveRequestRow.employee_id == parse_id(employee_id))
        if status:
            query = query.where(LeaveRequestRow.status == status)
        if year is not None:
            query = query.where(
                LeaveRequestRow.start_date >= f"{year}-01-01",
                LeaveRequestRow.start_date <= f"{year}-12-31",
            )
        return list(self.db.scalars(query.order_by(LeaveRequestRow.requested_at.desc())))
