from fastapi import APIRouter

from parkshare.api.v1 import bookings, spaces, vehicles
from parkshare.schemas.common import ErrorResponse

api_router = APIRouter(
    prefix="/api/v1",
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
    },
)

api_router.include_router(bookings.router)
api_router.include_router(spaces.router)
api_router.include_router(vehicles.router)
