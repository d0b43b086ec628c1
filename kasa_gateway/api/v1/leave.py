"""Employee leave endpoints (admin only)"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from kasa_gateway.api.dependencies import require_roles
from kasa_gateway.api.v1.schemas import (
    EmployeeCreateRequest,
    EmployeeResponse,
    LeaveEntitlementResponse,
    LeaveRequestCreate,
    LeaveRequestResponse,
    LeaveReviewRequest,
)
from kasa_gateway.domain.models import Actor, Role
from kasa_gateway.infrastructure.database.session import get_db
from kasa_gateway.services.leave_service import LeaveService

router = APIRouter()

admin_only = require_roles(Role.ADMIN)


@router.post("/employees", response_model=EmployeeResponse, status_code=status.HTTP_201_CREATED)
def create_employee(
    body: EmployeeCreateRequest,
    actor: Actor = Depends(admin_only),
    db: Session = Depends(get_db),
):
    """Register an employee and open this year's leave entitlement"""
    return LeaveService(db).create_employee(actor, body.model_dump())


@router.get("/requests", response_model=List[LeaveRequestResponse])
def list_requests(
    employee_id: Optional[str] = Query(None, alias="employeeId"),
    status_filter: Optional[str] = Query(None, alias="status"),
    year: Optional[int] = Query(None),
    actor: Actor = Depends(admin_only),
    db: Session = Depends(get_db),
):
    return LeaveService(db).list_requests(employee_id, status_filter, year)


@router.post("/requests", response_model=LeaveRequestResponse, status_code=status.HTTP_201_CREATED)
def create_request(
    body: LeaveRequestCreate,
    actor: Actor = Depends(admin_only),
    db: Session = Depends(get_db),
):
    return LeaveService(db).create_request(
        actor,
        employee_id=body.employee_id,
        leave_type=body.leave_type,
        start_date=body.start_date,
        end_date=body.end_date,
        description=body.description,
    )


@router.patch("/requests/{request_id}/review", response_model=LeaveRequestResponse)
def review_request(
    request_id: str,
    body: LeaveReviewRequest,
    actor: Actor = Depends(admin_only),
    db: Session = Depends(get_db),
):
    """Approve (debiting the entitlement) or reject a pending request"""
    return LeaveService(db).review(actor, request_id, body.action, body.notes)


@router.patch("/requests/{request_id}/cancel", response_model=LeaveRequestResponse)
def cancel_request(request_id: str, actor: Actor = Depends(admin_only), db: Session = Depends(get_db)):
    """Cancel a pending or approved request; approved days go back to the entitlement"""
    return LeaveService(db).cancel(actor, request_id)


@router.get("/entitlements/{employee_id}", response_model=List[LeaveEntitlementResponse])
def list_entitlements(
    employee_id: str,
    year: Optional[int] = Query(None),
    actor: Actor = Depends(admin_only),
    db: Session = Depends(get_db),
):
    return LeaveService(db).entitlements(employee_id, year)
