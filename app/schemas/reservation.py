from typing import Optional, List
from datetime import datetime, date
from pydantic import BaseModel

from app.models.reservation import ReservationStatus


class ReservationCreate(BaseModel):
    member_id: int
    class_id: int
    reservation_date: date


class Reservation(BaseModel):
    id: int
    member_id: int
    class_id: int
    reservation_date: date
    status: ReservationStatus
    created_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
    checked_in_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class OccurrenceReservation(Reservation):
    member_name: str


class OccurrenceReservations(BaseModel):
    """Asistentes de una ocurrencia concreta (clase, fecha)"""
    class_id: int
    reservation_date: date
    max_capacity: Optional[int] = None
    active_count: int
    spots_left: Optional[int] = None
    reservations: List[OccurrenceReservation] = []
