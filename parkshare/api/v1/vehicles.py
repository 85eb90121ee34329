from fastapi import APIRouter, Query, status

from parkshare.core.dependencies import DB
from parkshare.schemas.vehicle import CompatibilityResponse, VehicleCreate, VehicleResponse
from parkshare.services import vehicle as vehicle_service

router = APIRouter(prefix="/vehicles", tags=["Vehicles"])


@router.post("", response_model=VehicleResponse, status_code=status.HTTP_201_CREATED)
async def create_vehicle(db: DB, data: VehicleCreate):
    return await vehicle_service.create_vehicle(db, data)


@router.get("", response_model=list[VehicleResponse])
async def list_vehicles(db: DB, user_id: str = Query(...)):
    return await vehicle_service.get_vehicles(db, user_id)


@router.get("/{vehicle_id}/compatibility/{space_id}", response_model=CompatibilityResponse)
async def check_vehicle_compatibility(db: DB, vehicle_id: str, space_id: str):
    return await vehicle_service.check_vehicle_for_space(db, vehicle_id, space_id)
