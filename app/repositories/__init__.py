# Inicializador del paquete repositories
from app.repositories.base import BaseRepository

from app.repositories.user import user_repository
from app.repositories.reference import room_repository, discipline_repository, class_track_repository
from app.repositories.schedule import class_template_repository
from app.repositories.reservation import class_reservation_repository

__all__ = [
    "BaseRepository",
    "user_repository",
    "room_repository",
    "discipline_repository",
    "class_track_repository",
    "class_template_repository",
    "class_reservation_repository",
]
