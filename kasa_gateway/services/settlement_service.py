"""Settlement use cases: draft, submit, list, review, revise and delete.

Each public method resolves the record, applies the workflow guards, writes
through the repository inside one transaction and hands back the record in
normalized shape. Desk and dealer settlements share this code; the kind only
selects the pricing table and the categories.
"""

from typing import Any, Dict, List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from kasa_gateway.domain.banknotes import calculate_banknote_totals
from kasa_gateway.domain.exceptions import (
    ConflictError,
    DuplicateSubmissionError,
    NotFoundError,
    ValidationError,
)
from kasa_gateway.domain.models import (
    Actor,
    Role,
    SettlementInput,
    SettlementKind,
    SettlementRecord,
    SettlementStatus,
)
from kasa_gateway.domain.normalizer import (
    normalize_bank_sent_cash,
    normalize_banknotes,
    normalize_record,
)
from kasa_gateway.domain.pricing import PricingConfig, PricingTable
from kasa_gateway.domain.totals import calculate_totals
from kasa_gateway.domain.workflow import (
    ensure_can_delete,
    ensure_can_review,
    ensure_can_submit,
    ensure_can_update,
    ensure_can_view,
    parse_review_action,
)
from kasa_gateway.infrastructure.database.repositories import SettlementRepository
from kasa_gateway.infrastructure.database.session import atomic
from kasa_gateway.infrastructure.observability.logging import log_transition
from kasa_gateway.infrastructure.observability.metrics import (
    duplicate_submission_counter,
    record_settlement,
    review_counter,
)
from kasa_gateway.utils.date_utils import utcnow

ALL_STATUSES = "all"


class SettlementService:
    def __init__(self, db: Session, pricing: PricingConfig):
        self.db = db
        self.pricing = pricing
        self.repo = SettlementRepository(db)

    # -- helpers ---------------------------------------------------------

    def _content(self, table: PricingTable, data: SettlementInput) -> Dict[str, Any]:
        """Stored fields for a submission, with totals recomputed from the inputs"""
        totals = calculate_totals(table, data.products, data.category_credit_cards, data.payments)
        banknotes = normalize_banknotes(data.banknotes, table.banknote_categories)
        # Counts must value cleanly before anything is stored
        calculate_banknote_totals(banknotes, table.banknote_categories)
        return {
            "date": data.date,
            "products": dict(data.products or {}),
            "category_credit_cards": dict(data.category_credit_cards or {}),
            "payments": dict(data.payments or {}),
            "banknotes": banknotes,
            "bank_sent_cash": normalize_bank_sent_cash(data.bank_sent_cash, table.banknote_categories),
            "totals": totals.as_dict(),
        }

    def _present(self, record: SettlementRecord) -> SettlementRecord:
        return normalize_record(record, self.pricing.for_kind(record.kind))

    def _load(self, kind: SettlementKind, record_id: str) -> SettlementRecord:
        record = self.repo.get(record_id)
        if record is None or record.kind != kind:
            raise NotFoundError("Record not found")
        return record

    def _duplicate(self, kind: SettlementKind, date: str) -> DuplicateSubmissionError:
        duplicate_submission_counter.labels(kind=kind.value).inc()
        return DuplicateSubmissionError(f"A settlement has already been submitted for {date}")

    def _write_draft(
        self, kind: SettlementKind, actor: Actor, date: str, content: Dict[str, Any]
    ) -> SettlementRecord:
        with atomic(self.db):
            existing = self.repo.find_draft(kind, actor.uid, date)
            if existing is not None:
                return self.repo.update(existing.id, **content, submitted_at=utcnow())
            return self.repo.create(
                kind=kind.value,
                status=SettlementStatus.DRAFT.value,
                submitted_by=actor.uid,
                submitted_by_email=actor.email,
                **content,
            )

    # -- use cases -------------------------------------------------------

    def save_draft(self, kind: SettlementKind, actor: Actor, data: SettlementInput) -> SettlementRecord:
        """Create the caller's draft for the date, or overwrite the one already there."""
        if kind != SettlementKind.DESK:
            raise ValidationError("Drafts are only kept for desk settlements")
        ensure_can_submit(actor)

        content = self._content(self.pricing.for_kind(kind), data)
        try:
            record = self._write_draft(kind, actor, data.date, content)
        except IntegrityError:
            # A concurrent save created the draft first; overwrite it instead
            try:
                record = self._write_draft(kind, actor, data.date, content)
            except IntegrityError as e:
                raise ConflictError(f"Draft for {data.date} is being saved concurrently") from e

        record_settlement(kind.value, SettlementStatus.DRAFT.value, record.totals["difference"])
        log_transition(record.id, kind.value, "save", None, SettlementStatus.DRAFT.value, actor.uid, actor.role)
        return self._present(record)

    def submit(self, kind: SettlementKind, actor: Actor, data: SettlementInput) -> SettlementRecord:
        """Submit the day's figures for review, replacing the caller's draft if any."""
        ensure_can_submit(actor)
        if self.repo.has_active(kind, actor.uid, data.date):
            raise self._duplicate(kind, data.date)

        content = self._content(self.pricing.for_kind(kind), data)
        try:
            with atomic(self.db):
                draft = self.repo.find_draft(kind, actor.uid, data.date)
                if draft is not None:
                    self.repo.delete(draft.id)
                record = self.repo.create(
                    kind=kind.value,
                    status=SettlementStatus.SUBMITTED.value,
                    submitted_by=actor.uid,
                    submitted_by_email=actor.email,
                    **content,
                )
        except IntegrityError as e:
            # Lost the race against a concurrent submission for the same day
            raise self._duplicate(kind, data.date) from e

        record_settlement(kind.value, SettlementStatus.SUBMITTED.value, record.totals["difference"])
        log_transition(record.id, kind.value, "submit", None, record.status.value, actor.uid, actor.role)
        return self._present(record)

    def list_records(
        self,
        kind: SettlementKind,
        actor: Actor,
        status: Optional[str] = None,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
    ) -> List[SettlementRecord]:
        """
        List settlements visible to the caller, newest date first.

        Desk users only see their own rows. Without a status filter (or with
        ``all``) drafts are left out; ``draft`` returns the caller's own drafts.
        """
        submitted_by = actor.uid if actor.has_role(Role.DESK) else None

        if not status or status == ALL_STATUSES:
            statuses = [s for s in SettlementStatus if s != SettlementStatus.DRAFT]
        else:
            try:
                wanted = SettlementStatus(status)
            except ValueError:
                raise ValidationError(f"Invalid status '{status}'")
            if wanted == SettlementStatus.DRAFT:
                submitted_by = actor.uid
            statuses = [wanted]

        records = self.repo.list(
            kind,
            submitted_by=submitted_by,
            statuses=statuses,
            start_date=start_date,
            end_date=end_date,
        )
        return [self._present(r) for r in records]

    def get_record(self, kind: SettlementKind, actor: Actor, record_id: str) -> SettlementRecord:
        record = self._load(kind, record_id)
        ensure_can_view(actor, record)
        return self._present(record)

    def get_draft(self, kind: SettlementKind, actor: Actor, date: str) -> Optional[SettlementRecord]:
        draft = self.repo.find_draft(kind, actor.uid, date)
        return self._present(draft) if draft else None

    def review(
        self,
        kind: SettlementKind,
        actor: Actor,
        record_id: str,
        action: str,
        notes: Optional[str] = None,
    ) -> SettlementRecord:
        """Approve, reject or send back a submitted (or revised) settlement."""
        review_action = parse_review_action(action)
        record = self._load(kind, record_id)
        target = ensure_can_review(actor, record, review_action)

        with atomic(self.db):
            updated = self.repo.update(
                record.id,
                status=target.value,
                reviewed_by=actor.uid,
                reviewed_by_email=actor.email,
                reviewed_by_role=actor.role,
                reviewed_at=utcnow(),
                review_notes=notes or "",
                review_action=review_action.value,
            )

        review_counter.labels(kind=kind.value, action=review_action.value).inc()
        log_transition(
            record.id, kind.value, review_action.value, record.status.value, target.value, actor.uid, actor.role
        )
        return self._present(updated)

    def update(
        self, kind: SettlementKind, actor: Actor, record_id: str, data: SettlementInput
    ) -> SettlementRecord:
        """Resubmit corrected figures for a record sent back for revision."""
        record = self._load(kind, record_id)
        target = ensure_can_update(actor, record)

        content = self._content(self.pricing.for_kind(kind), data)
        try:
            with atomic(self.db):
                updated = self.repo.update(record.id, **content, status=target.value, submitted_at=utcnow())
        except IntegrityError as e:
            raise self._duplicate(kind, data.date) from e

        record_settlement(kind.value, target.value, updated.totals["difference"])
        log_transition(record.id, kind.value, "update", record.status.value, target.value, actor.uid, actor.role)
        return self._present(updated)

    def delete(self, kind: SettlementKind, actor: Actor, record_id: str) -> str:
        record = self._load(kind, record_id)
        ensure_can_delete(actor, record)

        with atomic(self.db):
            self.repo.delete(record.id)

        log_transition(record.id, kind.value, "delete", record.status.value, None, actor.uid, actor.role)
        return record.id
