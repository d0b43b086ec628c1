"""SQLAlchemy ORM models for settlements, progress payments, fleet and leave"""

import uuid
from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    Text,
    UniqueConstraint,
    Uuid,
    text,
)
from sqlalchemy.orm import declarative_base, relationship

from kasa_gateway.utils.date_utils import utcnow

Base = declarative_base()


class SettlementRecordRow(Base):
    """Desk or dealer daily settlement"""

    __tablename__ = "settlement_record"
    __table_args__ = (
        # One live submission per cashier/dealer, day and kind
        Index(
            "uq_settlement_active",
            "submitted_by",
            "date",
            "kind",
            unique=True,
            postgresql_where=text("status IN ('submitted', 'approved', 'revised')"),
            sqlite_where=text("status IN ('submitted', 'approved', 'revised')"),
        ),
        Index(
            "uq_settlement_draft",
            "submitted_by",
            "date",
            "kind",
            unique=True,
            postgresql_where=text("status = 'draft'"),
            sqlite_where=text("status = 'draft'"),
        ),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    kind = Column(Text, nullable=False, index=True)
    date = Column(Text, nullable=False, index=True)
    status = Column(Text, nullable=False, index=True)
    products = Column(JSON, nullable=False, default=dict)
    category_credit_cards = Column(JSON, nullable=False, default=dict)
    payments = Column(JSON, nullable=False, default=dict)
    banknotes = Column(JSON, nullable=True)
    bank_sent_cash = Column(JSON, nullable=True)
    totals = Column(JSON, nullable=False)
    submitted_by = Column(Text, nullable=False, index=True)
    submitted_by_email = Column(Text, nullable=True)
    submitted_at = Column(DateTime(timezone=True), nullable=True, default=utcnow)
    reviewed_by = Column(Text, nullable=True)
    reviewed_by_email = Column(Text, nullable=True)
    reviewed_by_role = Column(Text, nullable=True)
    reviewed_at = Column(DateTime(timezone=True), nullable=True)
    review_notes = Column(Text, nullable=True)
    review_action = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)


class HakedisRow(Base):
    """Progress payment reconciling reported vs system fare revenue"""

    __tablename__ = "hakedis"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    date = Column(Text, nullable=False, index=True)
    type = Column(Text, nullable=False, index=True)
    routes = Column(JSON, nullable=False, default=dict)
    vehicles = Column(JSON, nullable=False, default=dict)
    raporal = Column(Float, nullable=False)
    sistem = Column(Float, nullable=False)
    difference = Column(Float, nullable=False)
    created_by = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    reports = relationship("ReportRowModel", back_populates="hakedis", cascade="all, delete-orphan")


class ReportRowModel(Base):
    """Per-vehicle share of a progress payment"""

    __tablename__ = "report"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    hakedis_id = Column(Uuid, ForeignKey("hakedis.id", ondelete="CASCADE"), nullable=False, index=True)
    date = Column(Text, nullable=False, index=True)
    vehicle_number = Column(Integer, nullable=False, index=True)
    plate_number = Column(Text, nullable=True)
    route_name = Column(Text, nullable=True)
    route_amount = Column(Float, nullable=False, default=0.0)
    vehicle_amount = Column(Float, nullable=False, default=0.0)
    total_amount = Column(Float, nullable=False, default=0.0)
    type = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    hakedis = relationship("HakedisRow", back_populates="reports")


class VehicleRow(Base):
    """Fleet vehicle master data"""

    __tablename__ = "vehicle"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    vehicle_number = Column(Integer, nullable=False, unique=True)
    plate_number = Column(Text, nullable=False, unique=True)
    route_name = Column(Text, nullable=True)
    driver_name = Column(Text, nullable=True)
    owner_name = Column(Text, nullable=True)
    iban = Column(Text, nullable=True)
    tax_id = Column(Text, nullable=True)
    contact_info = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)


class EmployeeRow(Base):
    __tablename__ = "employee"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    first_name = Column(Text, nullable=False)
    last_name = Column(Text, nullable=False)
    tc_no = Column(Text, nullable=False, unique=True)
    email = Column(Text, nullable=False, default="")
    phone = Column(Text, nullable=False, default="")
    department = Column(Text, nullable=False, default="")
    position = Column(Text, nullable=False, default="")
    start_date = Column(Text, nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    entitlements = relationship("LeaveEntitlementRow", back_populates="employee", cascade="all, delete-orphan")


class LeaveEntitlementRow(Base):
    """Yearly leave balance of one employee"""

    __tablename__ = "leave_entitlement"
    __table_args__ = (UniqueConstraint("employee_id", "year", name="uq_entitlement_employee_year"),)

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    employee_id = Column(Uuid, ForeignKey("employee.id", ondelete="CASCADE"), nullable=False, index=True)
    year = Column(Integer, nullable=False)
    total_days = Column(Integer, nullable=False)
    used_days = Column(Integer, nullable=False, default=0)
    remaining_days = Column(Integer, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    employee = relationship("EmployeeRow", back_populates="entitlements")


class LeaveRequestRow(Base):
    __tablename__ = "leave_request"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    employee_id = Column(Uuid, ForeignKey("employee.id", ondelete="CASCADE"), nullable=False, index=True)
    leave_type = Column(Text, nullable=False)
    start_date = Column(Text, nullable=False)
    end_date = Column(Text, nullable=False)
    total_days = Column(Integer, nullable=False)
    status = Column(Text, nullable=False, default="pending", index=True)
    description = Column(Text, nullable=False, default="")
    reviewed_by = Column(Text, nullable=True)
    reviewed_by_email = Column(Text, nullable=True)
    review_notes = Column(Text, nullable=True)
    reviewed_at = Column(DateTime(timezone=True), nullable=True)
    requested_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)
