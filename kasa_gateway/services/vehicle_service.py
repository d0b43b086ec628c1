"""Fleet registry used by progress payment distribution"""

from typing import Any, Dict, List

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from kasa_gateway.domain.exceptions import ConflictError, NotFoundError
from kasa_gateway.domain.models import Actor
from kasa_gateway.infrastructure.database.models import VehicleRow
from kasa_gateway.infrastructure.database.repositories import VehicleRepository
from kasa_gateway.infrastructure.database.session import atomic
from kasa_gateway.infrastructure.observability.logging import logger


class VehicleService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = VehicleRepository(db)

    def create(self, actor: Actor, fields: Dict[str, Any]) -> VehicleRow:
        if self.repo.get_by_plate(fields["plate_number"]) is not None:
            raise ConflictError("A vehicle with this plate number already exists")
        if self.repo.get_by_number(fields["vehicle_number"]) is not None:
            raise ConflictError("A vehicle with this vehicle number already exists")

        try:
            with atomic(self.db):
                vehicle = self.repo.create(**fields)
        except IntegrityError as e:
            raise ConflictError("Vehicle already exists") from e

        logger.info(
            "Vehicle registered",
            extra={"vehicle_id": str(vehicle.id), "step": "vehicle_created", "actor_id": actor.uid},
        )
        return vehicle

    def list(self) -> List[VehicleRow]:
        return self.repo.list()

    def get(self, vehicle_id: str) -> VehicleRow:
        vehicle = self.repo.get(vehicle_id)
        if vehicle is None:
            raise NotFoundError("Vehicle not found")
        return vehicle
