"""API v1 router configuration."""

from fastapi import APIRouter

from app.api.v1.endpoints import (
    accounts,
    admin,
    appointments,
    doctor,
    health,
    patients,
    secretary,
)

api_router = APIRouter()

# Include routers; each one carries its own prefix and tags
api_router.include_router(health.router)
api_router.include_router(accounts.router)
api_router.include_router(admin.router)
api_router.include_router(patients.router)
api_router.include_router(appointments.router)
api_router.include_router(secretary.router)
api_router.include_router(doctor.router)
