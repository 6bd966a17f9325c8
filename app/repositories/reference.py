from typing import Optional

from sqlalchemy.orm import Session

from app.models.reference import Room, Discipline, ClassTrack
from app.repositories.base import SoftDeleteRepository
from app.schemas.reference import (
    RoomCreate, RoomUpdate,
    DisciplineCreate, DisciplineUpdate,
    ClassTrackCreate, ClassTrackUpdate,
)


class RoomRepository(SoftDeleteRepository[Room, RoomCreate, RoomUpdate]):
    pass


class DisciplineRepository(SoftDeleteRepository[Discipline, DisciplineCreate, DisciplineUpdate]):
    def get_by_slug(self, db: Session, *, slug: str) -> Optional[Discipline]:
        return db.query(Discipline).filter(Discipline.slug == slug).first()


class ClassTrackRepository(SoftDeleteRepository[ClassTrack, ClassTrackCreate, ClassTrackUpdate]):
    pass


room_repository = RoomRepository(Room)
discipline_repository = DisciplineRepository(Discipline)
class_track_repository = ClassTrackRepository(ClassTrack)
