from fastapi import APIRouter

from app.api.v1.endpoints import energy, system

api_v1_router = APIRouter()

# System endpoints (status, connectivity)
api_v1_router.include_router(system.router, tags=["System"])

# Aggregation queries + query history
api_v1_router.include_router(energy.router, tags=["Energy"])
