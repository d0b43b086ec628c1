"""Progress payment (hakediş) use cases and the weekly per-vehicle summary"""

from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from kasa_gateway.domain.exceptions import NotFoundError, ValidationError
from kasa_gateway.domain.models import Actor, HakedisType, WeeklySummary
from kasa_gateway.domain.progress import build_report_rows, calculate_difference, summarize_week
from kasa_gateway.infrastructure.database.models import HakedisRow
from kasa_gateway.infrastructure.database.repositories import HakedisRepository, VehicleRepository
from kasa_gateway.infrastructure.database.session import atomic
from kasa_gateway.infrastructure.observability.logging import logger
from kasa_gateway.infrastructure.observability.metrics import report_rows_histogram

# Fields a progress payment update may touch
UPDATABLE_FIELDS = ("date", "type", "routes", "vehicles", "raporal", "sistem")


def parse_hakedis_type(value: Any) -> HakedisType:
    try:
        return HakedisType(value)
    except ValueError:
        raise ValidationError(f"Invalid hakedis type '{value}'")


class HakedisService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = HakedisRepository(db)
        self.vehicles = VehicleRepository(db)

    def create(
        self,
        actor: Actor,
        date: str,
        hakedis_type: str,
        raporal: float,
        sistem: float,
        routes: Optional[Dict[str, Any]] = None,
        vehicles: Optional[Dict[str, Any]] = None,
    ) -> HakedisRow:
        """
        Store a progress payment and distribute it over the fleet.

        The payment and all of its report rows are committed together; if any
        row fails to write, nothing is kept.
        """
        kind = parse_hakedis_type(hakedis_type)
        routes = routes or {}
        vehicles = vehicles or {}

        report_rows = build_report_rows(date, kind, routes, vehicles, self.vehicles.fleet())

        with atomic(self.db):
            hakedis = self.repo.create(
                report_rows,
                date=date,
                type=kind.value,
                routes=routes,
                vehicles=vehicles,
                raporal=raporal,
                sistem=sistem,
                difference=calculate_difference(raporal, sistem),
                created_by=actor.uid,
            )

        report_rows_histogram.observe(len(report_rows))
        logger.info(
            "Progress payment created",
            extra={
                "hakedis_id": str(hakedis.id),
                "step": "hakedis_created",
                "type": kind.value,
                "report_rows": len(report_rows),
                "actor_id": actor.uid,
            },
        )
        return hakedis

    def list(
        self,
        hakedis_type: Optional[str] = None,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
    ) -> List[HakedisRow]:
        if hakedis_type:
            hakedis_type = parse_hakedis_type(hakedis_type).value
        return self.repo.list(hakedis_type, start_date, end_date)

    def get(self, hakedis_id: str) -> HakedisRow:
        hakedis = self.repo.get(hakedis_id)
        if hakedis is None:
            raise NotFoundError("Hakedis not found")
        return hakedis

    def update(self, actor: Actor, hakedis_id: str, changes: Dict[str, Any]) -> HakedisRow:
        """Apply known fields; the difference follows raporal and sistem. Report rows are left as written."""
        hakedis = self.get(hakedis_id)

        with atomic(self.db):
            for name in UPDATABLE_FIELDS:
                if changes.get(name) is None:
                    continue
                value = changes[name]
                if name == "type":
                    value = parse_hakedis_type(value).value
                setattr(hakedis, name, value)
            hakedis.difference = calculate_difference(hakedis.raporal, hakedis.sistem)
            self.db.flush()

        logger.info(
            "Progress payment updated",
            extra={"hakedis_id": str(hakedis.id), "step": "hakedis_updated", "actor_id": actor.uid},
        )
        return hakedis

    def delete(self, actor: Actor, hakedis_id: str) -> str:
        hakedis = self.get(hakedis_id)
        deleted_id = str(hakedis.id)

        with atomic(self.db):
            self.repo.delete(hakedis)

        logger.info(
            "Progress payment deleted",
            extra={"hakedis_id": deleted_id, "step": "hakedis_deleted", "actor_id": actor.uid},
        )
        return deleted_id

    def report_count(self, hakedis_id: Any) -> int:
        return self.repo.count_reports(hakedis_id)

    def weekly_summary(self, start_date: Optional[str], end_date: Optional[str]) -> WeeklySummary:
        if not start_date or not end_date:
            raise ValidationError("startDate and endDate are required")
        if start_date > end_date:
            raise ValidationError("End date cannot be before start date")

        rows = self.repo.reports_between(start_date, end_date)
        return summarize_week(start_date, end_date, rows, self.vehicles.fleet())
