from fastapi import APIRouter

# Import routers from modules
from app.api.v1.endpoints import members

# Import modular packages directly
from app.api.v1.endpoints.schedule import router as schedule_router

api_router = APIRouter()

# Schedule module (class templates, grid, reservations and reference data)
api_router.include_router(schedule_router, prefix="/schedule")

# Member directory (read-only)
api_router.include_router(members.router, prefix="/members", tags=["members"])
