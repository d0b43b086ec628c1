"""Fleet vehicle endpoints"""

from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from kasa_gateway.api.dependencies import get_current_actor, require_roles
from kasa_gateway.api.v1.schemas import VehicleCreateRequest, VehicleResponse
from kasa_gateway.domain.models import Actor, Role
from kasa_gateway.infrastructure.database.session import get_db
from kasa_gateway.services.vehicle_service import VehicleService

router = APIRouter()


@router.post("", response_model=VehicleResponse, status_code=status.HTTP_201_CREATED)
def create_vehicle(
    body: VehicleCreateRequest,
    actor: Actor = Depends(require_roles(Role.ADMIN, Role.SUPERVISOR)),
    db: Session = Depends(get_db),
):
    """Register a vehicle; plate and vehicle number must both be unused"""
    return VehicleService(db).create(actor, body.model_dump())


@router.get("", response_model=List[VehicleResponse])
def list_vehicles(actor: Actor = Depends(get_current_actor), db: Session = Depends(get_db)):
    return VehicleService(db).list()


@router.get("/{vehicle_id}", response_model=VehicleResponse)
def get_vehicle(vehicle_id: str, actor: Actor = Depends(get_current_actor), db: Session = Depends(get_db)):
    return VehicleService(db).get(vehicle_id)
