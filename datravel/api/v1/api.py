from fastapi import APIRouter
from datravel.api.v1.endpoints import (
    director_profile, director_travel_orders, directors, time_logs, travel_orders,
)

# Create main API router
api_router = APIRouter()

api_router.include_router(
    travel_orders.router,
    prefix="/travel-orders",
    tags=["travel-orders"]
)

api_router.include_router(
    directors.router,
    prefix="/directors",
    tags=["directors"]
)

api_router.include_router(
    director_travel_orders.router,
    prefix="/director/travel-orders",
    tags=["director-travel-orders"]
)

api_router.include_router(
    director_profile.router,
    prefix="/director/profile",
    tags=["director-profile"]
)

api_router.include_router(
    time_logs.router,
    prefix="/ict-admin/time-logs",
    tags=["ict-admin"]
)
