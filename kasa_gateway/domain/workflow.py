"""
Settlement review workflow - status transitions and who may trigger them.

STATE MACHINE:

    (new) --save--> DRAFT --submit--> SUBMITTED
    (new) --submit--> SUBMITTED
    SUBMITTED | REVISED --approve--> APPROVED
    SUBMITTED | REVISED --reject--> REJECTED
    SUBMITTED | REVISED --revise--> PENDING_REVISION
    PENDING_REVISION --update--> REVISED

    Deletable: DRAFT, REJECTED, REVISED, PENDING_REVISION.
    SUBMITTED and APPROVED records are never deleted.

Authorization is checked before the state guard, so a caller without access
gets ForbiddenError even when the transition would also be invalid.
"""

from typing import FrozenSet

from kasa_gateway.domain.exceptions import (
    ForbiddenError,
    InvalidStateTransitionError,
    ValidationError,
)
from kasa_gateway.domain.models import Actor, ReviewAction, Role, SettlementRecord, SettlementStatus

REVIEWER_ROLES = (Role.ADMIN, Role.SUPERVISOR, Role.RESPONSIBLE)
EDITOR_ROLES = (Role.ADMIN, Role.SUPERVISOR)

# At most one record in these states per (submitter, date, kind)
ACTIVE_STATUSES: FrozenSet[SettlementStatus] = frozenset(
    {SettlementStatus.SUBMITTED, SettlementStatus.APPROVED, SettlementStatus.REVISED}
)
REVIEWABLE_STATUSES: FrozenSet[SettlementStatus] = frozenset(
    {SettlementStatus.SUBMITTED, SettlementStatus.REVISED}
)
DELETABLE_STATUSES: FrozenSet[SettlementStatus] = frozenset(
    {
        SettlementStatus.DRAFT,
        SettlementStatus.REJECTED,
        SettlementStatus.REVISED,
        SettlementStatus.PENDING_REVISION,
    }
)

REVIEW_TRANSITIONS = {
    ReviewAction.APPROVE: SettlementStatus.APPROVED,
    ReviewAction.REJECT: SettlementStatus.REJECTED,
    ReviewAction.REVISE: SettlementStatus.PENDING_REVISION,
}


def parse_review_action(action: str) -> ReviewAction:
    try:
        return ReviewAction(action)
    except ValueError:
        raise ValidationError(f"Invalid action '{action}'. Must be one of: approve, reject, revise")


def _is_owner(actor: Actor, record: SettlementRecord) -> bool:
    return record.submitted_by == actor.uid


def ensure_can_submit(actor: Actor) -> None:
    if not actor.has_role(Role.DESK):
        raise ForbiddenError("Only desk users can submit settlements")


def ensure_can_view(actor: Actor, record: SettlementRecord) -> None:
    if record.status == SettlementStatus.DRAFT and not _is_owner(actor, record):
        raise ForbiddenError("Drafts are visible to their submitter only")
    if actor.has_role(Role.DESK) and not _is_owner(actor, record):
        raise ForbiddenError("Not allowed to view this record")


def ensure_can_review(actor: Actor, record: SettlementRecord, action: ReviewAction) -> SettlementStatus:
    """Check a review is allowed and return the status it leads to."""
    if not actor.has_role(*REVIEWER_ROLES):
        raise ForbiddenError("Not allowed to review settlements")
    if record.status not in REVIEWABLE_STATUSES:
        raise InvalidStateTransitionError(
            f"Cannot {action.value} a record in status '{record.status.value}'"
        )
    return REVIEW_TRANSITIONS[action]


def ensure_can_update(actor: Actor, record: SettlementRecord) -> SettlementStatus:
    """Check a revision update is allowed and return the status it leads to."""
    if not (_is_owner(actor, record) or actor.has_role(*EDITOR_ROLES)):
        raise ForbiddenError("Not allowed to update this record")
    if record.status != SettlementStatus.PENDING_REVISION:
        raise InvalidStateTransitionError("Only records pending revision can be updated")
    return SettlementStatus.REVISED


def ensure_can_delete(actor: Actor, record: SettlementRecord) -> None:
    if record.status == SettlementStatus.DRAFT:
        if not _is_owner(actor, record):
            raise ForbiddenError("Drafts can only be deleted by their submitter")
    elif not (_is_owner(actor, record) or actor.has_role(*REVIEWER_ROLES)):
        raise ForbiddenError("Not allowed to delete this record")
    if record.status not in DELETABLE_STATUSES:
        raise InvalidStateTransitionError(
            "Only draft, rejected, revised or pending revision records can be deleted"
        )
