"""
Employee leave use cases.

Entitlements are debited when a request is approved and credited back when an
approved request is cancelled. Both moves lock the current-year entitlement row
and commit together with the request's status change.
"""

from typing import Any, Dict, List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from kasa_gateway.domain.exceptions import (
    ConflictError,
    InvalidStateTransitionError,
    NotFoundError,
    ValidationError,
)
from kasa_gateway.domain.leave import (
    ANNUAL_LEAVE,
    LEAVE_APPROVED,
    LEAVE_CANCELLED,
    LEAVE_PENDING,
    LEAVE_REJECTED,
    OPEN_LEAVE_STATUSES,
    annual_leave_days,
    overlaps,
    parse_iso_date,
    requested_workdays,
)
from kasa_gateway.domain.models import Actor
from kasa_gateway.infrastructure.database.models import (
    EmployeeRow,
    LeaveEntitlementRow,
    LeaveRequestRow,
)
from kasa_gateway.infrastructure.database.repositories import LeaveRepository
from kasa_gateway.infrastructure.database.session import atomic
from kasa_gateway.infrastructure.observability.logging import logger
from kasa_gateway.utils.date_utils import utcnow

REVIEW_OUTCOMES = {"approve": LEAVE_APPROVED, "reject": LEAVE_REJECTED}


class LeaveService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = LeaveRepository(db)

    def create_employee(self, actor: Actor, fields: Dict[str, Any]) -> EmployeeRow:
        """Register an employee with this year's entitlement sized by seniority"""
        started = parse_iso_date(fields["start_date"], "startDate")
        if self.repo.get_employee_by_tc_no(fields["tc_no"]) is not None:
            raise ConflictError("An employee with this TC number already exists")

        today = utcnow().date()
        total_days = annual_leave_days(started, today)

        try:
            with atomic(self.db):
                employee = self.repo.add(EmployeeRow(**fields))
                self.repo.add(
                    LeaveEntitlementRow(
                        employee_id=employee.id,
                        year=today.year,
                        total_days=total_days,
                        used_days=0,
                        remaining_days=total_days,
                    )
                )
        except IntegrityError as e:
            raise ConflictError("An employee with this TC number already exists") from e

        logger.info(
            "Employee created",
            extra={"employee_id": str(employee.id), "step": "employee_created", "actor_id": actor.uid},
        )
        return employee

    def create_request(
        self,
        actor: Actor,
        employee_id: str,
        leave_type: str,
        start_date: str,
        end_date: str,
        description: Optional[str] = None,
    ) -> LeaveRequestRow:
        employee = self.repo.get_employee(employee_id)
        if employee is None:
            raise NotFoundError("Employee not found")

        total_days = requested_workdays(start_date, end_date)

        if leave_type == ANNUAL_LEAVE:
            current = self.repo.entitlements(employee.id, utcnow().year)
            if current and current[0].remaining_days < total_days:
                raise ValidationError(
                    f"Insufficient leave balance. Remaining: {current[0].remaining_days} days, "
                    f"requested: {total_days} days"
                )

        existing = self.repo.open_requests(employee.id, OPEN_LEAVE_STATUSES)
        if overlaps(start_date, end_date, [(r.start_date, r.end_date) for r in existing]):
            raise ConflictError("A leave request already covers this date range")

        with atomic(self.db):
            request = self.repo.add(
                LeaveRequestRow(
                    employee_id=employee.id,
                    leave_type=leave_type,
                    start_date=start_date,
                    end_date=end_date,
                    total_days=total_days,
                    status=LEAVE_PENDING,
                    description=description or "",
                )
            )

        logger.info(
            "Leave requested",
            extra={
                "leave_request_id": str(request.id),
                "employee_id": str(employee.id),
                "step": "leave_requested",
                "total_days": total_days,
                "actor_id": actor.uid,
            },
        )
        return request

    def list_requests(
        self,
        employee_id: Optional[str] = None,
        status: Optional[str] = None,
        year: Optional[int] = None,
    ) -> List[LeaveRequestRow]:
        return self.repo.list_requests(employee_id, status, year)

    def _lock_request(self, request_id: str) -> LeaveRequestRow:
        request = self.repo.request_for_update(request_id)
        if request is None:
            raise NotFoundError("Leave request not found")
        return request

    def _adjust_balance(self, request: LeaveRequestRow, days: int) -> None:
        """Move ``days`` into (positive) or out of (negative) used days, if an entitlement exists"""
        entitlement = self.repo.entitlement_for_update(request.employee_id, utcnow().year)
        if entitlement is None:
            return
        entitlement.used_days = entitlement.used_days + days
        entitlement.remaining_days = entitlement.remaining_days - days

    def review(self, actor: Actor, request_id: str, action: str, notes: Optional[str] = None) -> LeaveRequestRow:
        outcome = REVIEW_OUTCOMES.get(action)
        if outcome is None:
            raise ValidationError(f"Invalid action '{action}'. Must be one of: approve, reject")

        with atomic(self.db):
            request = self._lock_request(request_id)
            if request.status != LEAVE_PENDING:
                raise InvalidStateTransitionError("Only pending leave requests can be reviewed")
            if outcome == LEAVE_APPROVED:
                self._adjust_balance(request, request.total_days)
            request.status = outcome
            request.reviewed_by = actor.uid
            request.reviewed_by_email = actor.email
            request.review_notes = notes or ""
            request.reviewed_at = utcnow()
            self.db.flush()

        logger.info(
            "Leave request reviewed",
            extra={
                "leave_request_id": str(request.id),
                "step": "leave_reviewed",
                "action": action,
                "to_status": outcome,
                "actor_id": actor.uid,
            },
        )
        return request

    def cancel(self, actor: Actor, request_id: str) -> LeaveRequestRow:
        with atomic(self.db):
            request = self._lock_request(request_id)
            if request.status not in OPEN_LEAVE_STATUSES:
                raise InvalidStateTransitionError("Only pending or approved leave requests can be cancelled")
            from_status = request.status
            if from_status == LEAVE_APPROVED:
                self._adjust_balance(request, -request.total_days)
            request.status = LEAVE_CANCELLED
            self.db.flush()

        logger.info(
            "Leave request cancelled",
            extra={
                "leave_request_id": str(request.id),
                "step": "leave_cancelled",
                "from_status": from_status,
                "actor_id": actor.uid,
            },
        )
        return request

    def entitlements(self, employee_id: str, year: Optional[int] = None) -> List[LeaveEntitlementRow]:
        if self.repo.get_employee(employee_id) is None:
            raise NotFoundError("Employee not found")
        return self.repo.entitlements(employee_id, year)
