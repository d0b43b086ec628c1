"""
Desk and dealer (bayi dolum) settlement endpoints.

Both share one router factory; the dealer variant has no draft endpoints.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.orm import Session

from kasa_gateway.api.dependencies import get_current_actor, get_pricing, require_roles
from kasa_gateway.api.v1.schemas import (
    DATE_PATTERN,
    DeletedResponse,
    ReviewRequest,
    SettlementPayload,
    SettlementResponse,
)
from kasa_gateway.domain.models import Actor, Role, SettlementInput, SettlementKind, SettlementRecord
from kasa_gateway.domain.pricing import PricingConfig
from kasa_gateway.infrastructure.database.session import get_db
from kasa_gateway.services.settlement_service import SettlementService


def _to_input(payload: SettlementPayload) -> SettlementInput:
    return SettlementInput(
        date=payload.date,
        products=payload.products,
        category_credit_cards=payload.category_credit_cards,
        payments=payload.payments,
        banknotes=payload.banknotes,
        bank_sent_cash=payload.bank_sent_cash,
    )


def _to_response(record: SettlementRecord) -> SettlementResponse:
    return SettlementResponse.model_validate(record)


def get_settlement_service(
    db: Session = Depends(get_db),
    pricing: PricingConfig = Depends(get_pricing),
) -> SettlementService:
    return SettlementService(db, pricing)


def build_router(kind: SettlementKind, with_drafts: bool) -> APIRouter:
    router = APIRouter()

    if with_drafts:

        @router.post("/save", response_model=SettlementResponse, status_code=status.HTTP_201_CREATED)
        def save_draft(
            payload: SettlementPayload,
            actor: Actor = Depends(require_roles(Role.DESK)),
            service: SettlementService = Depends(get_settlement_service),
        ):
            """Save (or overwrite) the caller's draft for the day"""
            return _to_response(service.save_draft(kind, actor, _to_input(payload)))

        @router.get("/draft/{date}", response_model=Optional[SettlementResponse])
        def get_draft(
            date: str = Path(..., pattern=DATE_PATTERN),
            actor: Actor = Depends(require_roles(Role.DESK)),
            service: SettlementService = Depends(get_settlement_service),
        ):
            """Caller's draft for the day, or null when none was saved"""
            draft = service.get_draft(kind, actor, date)
            return _to_response(draft) if draft else None

    @router.post("/submit", response_model=SettlementResponse, status_code=status.HTTP_201_CREATED)
    def submit(
        payload: SettlementPayload,
        actor: Actor = Depends(require_roles(Role.DESK)),
        service: SettlementService = Depends(get_settlement_service),
    ):
        """
        Submit the day's settlement for review.

        Returns 409 when an active settlement already exists for the caller and day.
        """
        return _to_response(service.submit(kind, actor, _to_input(payload)))

    @router.get("/submitted", response_model=List[SettlementResponse])
    def list_submitted(
        start_date: Optional[str] = Query(None, alias="startDate", pattern=DATE_PATTERN),
        end_date: Optional[str] = Query(None, alias="endDate", pattern=DATE_PATTERN),
        status_filter: Optional[str] = Query(None, alias="status"),
        actor: Actor = Depends(get_current_actor),
        service: SettlementService = Depends(get_settlement_service),
    ):
        records = service.list_records(kind, actor, status_filter, start_date, end_date)
        return [_to_response(r) for r in records]

    @router.get("/submitted/{record_id}", response_model=SettlementResponse)
    def get_record(
        record_id: str,
        actor: Actor = Depends(get_current_actor),
        service: SettlementService = Depends(get_settlement_service),
    ):
        return _to_response(service.get_record(kind, actor, record_id))

    @router.patch("/submitted/{record_id}/review", response_model=SettlementResponse)
    def review(
        record_id: str,
        body: ReviewRequest,
        actor: Actor = Depends(require_roles(Role.ADMIN, Role.SUPERVISOR, Role.RESPONSIBLE)),
        service: SettlementService = Depends(get_settlement_service),
    ):
        """Approve, reject or send back for revision"""
        return _to_response(service.review(kind, actor, record_id, body.action, body.notes))

    @router.put("/submitted/{record_id}", response_model=SettlementResponse)
    def update(
        record_id: str,
        payload: SettlementPayload,
        actor: Actor = Depends(require_roles(Role.ADMIN, Role.SUPERVISOR, Role.DESK)),
        service: SettlementService = Depends(get_settlement_service),
    ):
        """Resubmit a settlement that was sent back for revision"""
        return _to_response(service.update(kind, actor, record_id, _to_input(payload)))

    @router.delete("/submitted/{record_id}", response_model=DeletedResponse)
    def delete(
        record_id: str,
        actor: Actor = Depends(get_current_actor),
        service: SettlementService = Depends(get_settlement_service),
    ):
        return DeletedResponse(id=service.delete(kind, actor, record_id))

    return router


desk_router = build_router(SettlementKind.DESK, with_drafts=True)
dealer_router = build_router(SettlementKind.DEALER, with_drafts=False)
