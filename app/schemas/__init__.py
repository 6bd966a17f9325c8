from app.schemas.user import Member
from app.schemas.reference import (
    Room, RoomCreate, RoomUpdate,
    Discipline, DisciplineCreate, DisciplineUpdate,
    ClassTrack, ClassTrackCreate, ClassTrackUpdate,
)
from app.schemas.schedule import (
    ClassTemplate, ClassTemplateCreate, ClassTemplateUpdate,
    ClassReassign, ReassignmentImpact, ReassignmentResponse,
    BulkDeleteRequest, BulkDeleteResponse, OccurrenceDates,
)
from app.schemas.reservation import (
    Reservation, ReservationCreate, OccurrenceReservation, OccurrenceReservations,
)
from app.schemas.grid import ScheduleGrid
