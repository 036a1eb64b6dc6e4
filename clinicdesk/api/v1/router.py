"""API v1 router configuration."""

from fastapi import APIRouter

from clinicdesk.api.v1.endpoints import (
    archived,
    consultations,
    health,
    patients,
    prescriptions,
)

api_router = APIRouter()

# Include routers
api_router.include_router(health.router, tags=["Health"])
api_router.include_router(patients.router, prefix="/patients", tags=["Patients"])
api_router.include_router(consultations.router, prefix="/consultations", tags=["Consultations"])
api_router.include_router(prescriptions.router, prefix="/prescriptions", tags=["Prescriptions"])
api_router.include_router(archived.router, tags=["Archive"])
