from typing import Iterable, List, Optional

from sqlalchemy import delete
from sqlalchemy.orm import Session

from app.models.schedule import ClassTemplate
from app.models.reservation import ClassReservation
from app.repositories.base import BaseRepository
from app.schemas.schedule import ClassTemplateCreate, ClassTemplateUpdate


class ClassTemplateRepository(BaseRepository[ClassTemplate, ClassTemplateCreate, ClassTemplateUpdate]):
    def get_filtered(
        self,
        db: Session,
        *,
        active_only: bool = True,
        day_of_week: Optional[int] = None,
        room_id: Optional[int] = None,
        skip: int = 0,
        limit: Optional[int] = None
    ) -> List[ClassTemplate]:
        """
        Obtener plantillas de clase con filtros opcionales.

        Args:
            db: Sesión de base de datos
            active_only: Excluir plantillas desactivadas (soft delete)
            day_of_week: Día de la semana (0=Domingo, 6=Sábado)
            room_id: Sala concreta
            skip: Número de registros a omitir
            limit: Número máximo de registros (None = sin límite)

        Returns:
            Plantillas ordenadas por (start_time, id)
        """
        query = db.query(ClassTemplate)
        if active_only:
            query = query.filter(ClassTemplate.is_active.is_(True))
        if day_of_week is not None:
            query = query.filter(ClassTemplate.day_of_week == day_of_week)
        if room_id is not None:
            query = query.filter(ClassTemplate.room_id == room_id)

        query = query.order_by(ClassTemplate.start_time, ClassTemplate.id).offset(skip)
        if limit is not None:
            query = query.limit(limit)
        return query.all()

    def update_assignment(
        self, db: Session, *, db_obj: ClassTemplate, day_of_week: int, room_id: Optional[int]
    ) -> ClassTemplate:
        """
        Mover la plantilla a otro día y sala (drag-and-drop).

        UPDATE plano sin control de versión: si dos editores mueven la misma
        clase, gana la última escritura.
        """
        db_obj.day_of_week = day_of_week
        db_obj.room_id = room_id
        db.add(db_obj)
        db.commit()
        db.refresh(db_obj)
        return db_obj

    def bulk_delete(self, db: Session, *, ids: Iterable[int]) -> int:
        """
        Borrado físico de varias plantillas y de sus reservas.

        Los ids inexistentes se ignoran.

        Returns:
            Número de plantillas eliminadas
        """
        ids = list(ids)
        if not ids:
            return 0

        # SQLite no aplica ON DELETE CASCADE sin PRAGMA foreign_keys; se borran a mano
        db.execute(delete(ClassReservation).where(ClassReservation.class_id.in_(ids)))
        result = db.execute(delete(ClassTemplate).where(ClassTemplate.id.in_(ids)))
        db.commit()
        return result.rowcount or 0


class_template_repository = ClassTemplateRepository(ClassTemplate)
