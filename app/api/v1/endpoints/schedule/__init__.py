"""
Schedule Module - API Endpoints

This module organizes the different components of the gym scheduling core:
- Class templates (recurring or one-time class definitions) and bulk selection
- Drag-and-drop reassignment of day of week and room
- The day/week/month schedule grid built from virtual occurrences
- Reservations against a concrete (class, date) occurrence
- Reference data: rooms, disciplines and tracks

Occurrences are never stored: every grid request resolves them from the
templates, so editing a template changes all of its past and future dates.
"""

from fastapi import APIRouter

from app.api.v1.endpoints.schedule import (
    classes,
    grid,
    reservations,
    rooms,
    disciplines,
    tracks
)

router = APIRouter()

# Rutas para plantillas de clase y rejilla
router.include_router(classes.router, prefix="/classes", tags=["classes"])
router.include_router(grid.router, prefix="/grid", tags=["grid"])
router.include_router(reservations.router, prefix="/reservations", tags=["reservations"])

# Rutas para datos de referencia
router.include_router(rooms.router, prefix="/rooms", tags=["rooms"])
router.include_router(disciplines.router, prefix="/disciplines", tags=["disciplines"])
router.include_router(tracks.router, prefix="/tracks", tags=["tracks"])
