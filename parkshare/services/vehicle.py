from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from parkshare.core.exceptions import NotFoundError
from parkshare.models.vehicle import Vehicle
from parkshare.schemas.vehicle import CompatibilityResponse, VehicleCreate, VehicleResponse
from parkshare.services import parking as parking_service
from parkshare.services.compatibility import VehicleProfile


async def create_vehicle(db: AsyncSession, data: VehicleCreate) -> VehicleResponse:
    vehicle = Vehicle(**data.model_dump())
    db.add(vehicle)
    await db.flush()
    await db.refresh(vehicle)
    return VehicleResponse.model_validate(vehicle)


async def get_vehicles(db: AsyncSession, user_id: str) -> list[VehicleResponse]:
    result = await db.execute(
        select(Vehicle)
        .where(Vehicle.user_id == user_id)
        .order_by(Vehicle.is_default.desc(), Vehicle.created_at)
    )
    return [VehicleResponse.model_validate(v) for v in result.scalars().all()]


async def get_vehicle(db: AsyncSession, vehicle_id: str) -> Vehicle:
    result = await db.execute(select(Vehicle).where(Vehicle.id == vehicle_id))
    vehicle = result.scalar_one_or_none()
    if not vehicle:
        raise NotFoundError("Vehicle not found")
    return vehicle


async def check_vehicle_for_space(
    db: AsyncSession, vehicle_id: str, space_id: str
) -> CompatibilityResponse:
    vehicle = await get_vehicle(db, vehicle_id)
    profile = VehicleProfile(
        vehicle_type=vehicle.vehicle_type.value,
        length=vehicle.length,
        width=vehicle.width,
        height=vehicle.height,
        is_electric=vehicle.is_electric,
    )
    return await parking_service.check_compatibility(db, space_id, profile)
