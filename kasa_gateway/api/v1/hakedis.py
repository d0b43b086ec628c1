"""Progress payment (hakediş) endpoints and the weekly per-vehicle summary"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from kasa_gateway.api.dependencies import get_current_actor, require_roles
from kasa_gateway.api.v1.schemas import (
    DATE_PATTERN,
    DeletedResponse,
    HakedisCreateRequest,
    HakedisResponse,
    HakedisUpdateRequest,
    WeeklySummaryResponse,
    WeeklyTotalsSchema,
    VehicleWeeklySchema,
)
from kasa_gateway.domain.models import Actor, Role
from kasa_gateway.infrastructure.database.models import HakedisRow
from kasa_gateway.infrastructure.database.session import get_db
from kasa_gateway.services.hakedis_service import HakedisService

router = APIRouter()


def _to_response(hakedis: HakedisRow, report_count: Optional[int] = None) -> HakedisResponse:
    response = HakedisResponse.model_validate(hakedis)
    response.report_count = report_count
    return response


@router.post("", response_model=HakedisResponse, status_code=status.HTTP_201_CREATED)
def create_hakedis(
    body: HakedisCreateRequest,
    actor: Actor = Depends(require_roles(Role.ADMIN, Role.SUPERVISOR, Role.RESPONSIBLE)),
    db: Session = Depends(get_db),
):
    """
    Record a progress payment and distribute it to vehicles.

    One report row is written per vehicle on each listed route, plus one per
    listed vehicle whose route is not listed. ``reportCount`` tells how many.
    """
    service = HakedisService(db)
    hakedis = service.create(
        actor,
        date=body.date,
        hakedis_type=body.type.value,
        raporal=body.raporal,
        sistem=body.sistem,
        routes=body.routes,
        vehicles=body.vehicles,
    )
    return _to_response(hakedis, service.report_count(hakedis.id))


@router.get("", response_model=List[HakedisResponse])
def list_hakedis(
    hakedis_type: Optional[str] = Query(None, alias="type"),
    start_date: Optional[str] = Query(None, alias="startDate", pattern=DATE_PATTERN),
    end_date: Optional[str] = Query(None, alias="endDate", pattern=DATE_PATTERN),
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
):
    return [_to_response(h) for h in HakedisService(db).list(hakedis_type, start_date, end_date)]


@router.get("/weekly/summary", response_model=WeeklySummaryResponse)
def weekly_summary(
    start_date: Optional[str] = Query(None, alias="startDate", pattern=DATE_PATTERN),
    end_date: Optional[str] = Query(None, alias="endDate", pattern=DATE_PATTERN),
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
):
    """Per-vehicle HAFTALIK and KREDI_KARTI totals over an inclusive date range"""
    summary = HakedisService(db).weekly_summary(start_date, end_date)
    return WeeklySummaryResponse(
        start_date=summary.start_date,
        end_date=summary.end_date,
        vehicles=[VehicleWeeklySchema.model_validate(v) for v in summary.vehicles],
        summary=WeeklyTotalsSchema(
            total_haftalik=summary.total_haftalik,
            total_kredi_karti=summary.total_kredi_karti,
            grand_total=summary.grand_total,
            vehicle_count=len(summary.vehicles),
        ),
    )


@router.get("/{hakedis_id}", response_model=HakedisResponse)
def get_hakedis(
    hakedis_id: str,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
):
    service = HakedisService(db)
    hakedis = service.get(hakedis_id)
    return _to_response(hakedis, service.report_count(hakedis.id))


@router.put("/{hakedis_id}", response_model=HakedisResponse)
def update_hakedis(
    hakedis_id: str,
    body: HakedisUpdateRequest,
    actor: Actor = Depends(require_roles(Role.ADMIN, Role.SUPERVISOR)),
    db: Session = Depends(get_db),
):
    changes = body.model_dump(exclude_none=True)
    if "type" in changes:
        changes["type"] = changes["type"].value
    return _to_response(HakedisService(db).update(actor, hakedis_id, changes))


@router.delete("/{hakedis_id}", response_model=DeletedResponse)
def delete_hakedis(
    hakedis_id: str,
    actor: Actor = Depends(require_roles(Role.ADMIN)),
    db: Session = Depends(get_db),
):
    """Delete a progress payment together with its report rows"""
    return DeletedResponse(id=HakedisService(db).delete(actor, hakedis_id))
