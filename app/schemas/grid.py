from typing import Optional, List
import datetime
from pydantic import BaseModel


class GridRoom(BaseModel):
    id: int
    name: str
    color: Optional[str] = None
    sort_order: int = 0

    model_config = {"from_attributes": True}


class GridOccurrence(BaseModel):
    class_id: int
    name: str
    date: datetime.date
    start_time: datetime.time
    end_time: datetime.time
    room_id: Optional[int] = None
    discipline_id: int
    coach_id: Optional[int] = None
    track_id: Optional[int] = None
    max_capacity: Optional[int] = None
    reserved_count: int = 0
    spots_left: Optional[int] = None

    model_config = {"from_attributes": True}


class GridCell(BaseModel):
    room_id: Optional[int] = None
    occurrences: List[GridOccurrence] = []
    unassigned: List[GridOccurrence] = []
    overflow_count: int = 0

    model_config = {"from_attributes": True}


class GridDay(BaseModel):
    date: datetime.date
    weekday: int
    is_today: bool = False
    cells: List[GridCell] = []
    total_occurrences: int = 0

    model_config = {"from_attributes": True}


class ScheduleGrid(BaseModel):
    view_mode: str
    start_date: datetime.date
    end_date: datetime.date
    room_filter: Optional[int] = None
    rooms: List[GridRoom] = []
    days: List[GridDay] = []

    model_config = {"from_attributes": True}
