from app.models.user import User, UserRole
from app.models.reference import Room, Discipline, ClassTrack
from app.models.schedule import ClassTemplate
from app.models.reservation import ClassReservation, ReservationStatus
