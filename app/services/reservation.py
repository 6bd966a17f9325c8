from typing import List, Optional
from datetime import date
import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.exceptions import (
    CapacityExceededError,
    DuplicateReservationError,
    InvalidStatusTransitionError,
    NotFoundError,
    OccurrenceNotFoundError,
    ScheduleValidationError,
)
from app.models.reservation import ClassReservation, ReservationStatus
from app.repositories.reservation import class_reservation_repository
from app.repositories.schedule import class_template_repository
from app.repositories.user import user_repository
from app.schemas.reservation import OccurrenceReservation, OccurrenceReservations
from app.services.occurrence import occurrence_issue, occurs_on

logger = logging.getLogger(__name__)


class ReservationService:
    """
    Reservas de miembros sobre ocurrencias concretas (clase, fecha).

    Máquina de estados: reserved -> checked_in | cancelled. Ambos estados
    finales son definitivos.
    """

    def create_reservation(
        self, db: Session, *, member_id: int, class_id: int, reservation_date: date
    ) -> ClassReservation:
        """
        Reservar una plaza en la ocurrencia (class_id, reservation_date).

        El control de aforo y de duplicados se hace en una única sentencia
        INSERT ... SELECT ... WHERE, con la fila de la plantilla bloqueada.

        Raises:
            NotFoundError: Clase o miembro inexistente
            OccurrenceNotFoundError: La clase no tiene ocurrencia activa ese día
            DuplicateReservationError: El miembro ya tiene una reserva viva
            CapacityExceededError: No quedan plazas
        """
        template = class_template_repository.get(db, class_id)
        if not template:
            raise NotFoundError(f"Clase {class_id} no encontrada")
        member = user_repository.get(db, member_id)
        if not member:
            raise NotFoundError(f"Miembro {member_id} no encontrado")
        if not member.is_active:
            raise ScheduleValidationError(f"El miembro {member_id} está desactivado")

        if not occurs_on(template, reservation_date):
            issue = occurrence_issue(template)
            if issue:
                logger.warning(
                    f"Reserva rechazada sobre plantilla {class_id} con datos incompletos: {issue}"
                )
            raise OccurrenceNotFoundError(
                f"La clase {class_id} no tiene ocurrencia activa el {reservation_date.isoformat()}"
            )

        max_capacity = template.max_capacity
        try:
            class_reservation_repository.lock_template(db, class_id=class_id)
            inserted = class_reservation_repository.insert_if_available(
                db,
                member_id=member_id,
                class_id=class_id,
                reservation_date=reservation_date,
                max_capacity=max_capacity,
            )
            if not inserted:
                db.rollback()
                self._raise_rejection(db, member_id, class_id, reservation_date, max_capacity)
            db.commit()
        except IntegrityError:
            # Índice único parcial: otra petición del mismo miembro ganó la carrera
            db.rollback()
            logger.info(
                f"Reserva duplicada (índice único) miembro={member_id} clase={class_id} "
                f"fecha={reservation_date}"
            )
            raise DuplicateReservationError(
                f"El miembro {member_id} ya tiene una reserva para esta clase el {reservation_date.isoformat()}"
            )

        reservation = class_reservation_repository.get_active_for_member(
            db, member_id=member_id, class_id=class_id, reservation_date=reservation_date
        )
        logger.info(
            f"Reserva {reservation.id} creada: miembro={member_id} clase={class_id} fecha={reservation_date}"
        )
        return reservation

    def _raise_rejection(
        self,
        db: Session,
        member_id: int,
        class_id: int,
        reservation_date: date,
        max_capacity: Optional[int]
    ) -> None:
        existing = class_reservation_repository.get_active_for_member(
            db, member_id=member_id, class_id=class_id, reservation_date=reservation_date
        )
        if existing:
            logger.info(
                f"Reserva duplicada miembro={member_id} clase={class_id} fecha={reservation_date}"
            )
            raise DuplicateReservationError(
                f"El miembro {member_id} ya tiene una reserva para esta clase el {reservation_date.isoformat()}"
            )
        logger.info(
            f"Aforo completo ({max_capacity}) clase={class_id} fecha={reservation_date}; "
            f"reserva de miembro={member_id} rechazada"
        )
        raise CapacityExceededError(
            f"La clase {class_id} del {reservation_date.isoformat()} está completa ({max_capacity} plazas)"
        )

    def _get_reservation(self, db: Session, reservation_id: int) -> ClassReservation:
        reservation = class_reservation_repository.get(db, reservation_id)
        if not reservation:
            raise NotFoundError(f"Reserva {reservation_id} no encontrada")
        return reservation

    def _transition(
        self, db: Session, reservation_id: int, target: ReservationStatus
    ) -> ClassReservation:
        reservation = self._get_reservation(db, reservation_id)
        if reservation.status == target:
            logger.debug(f"Reserva {reservation_id} ya está en {target.value}; sin cambios")
            return reservation
        if reservation.status != ReservationStatus.RESERVED:
            raise InvalidStatusTransitionError(
                f"No se puede pasar la reserva {reservation_id} de {reservation.status.value} a {target.value}"
            )

        updated = class_reservation_repository.transition(
            db, reservation_id=reservation_id, target=target
        )
        db.refresh(reservation)
        if not updated and reservation.status != target:
            # Otra petición la llevó al otro estado final entre la lectura y el UPDATE
            raise InvalidStatusTransitionError(
                f"No se puede pasar la reserva {reservation_id} de {reservation.status.value} a {target.value}"
            )
        logger.info(f"Reserva {reservation_id} -> {target.value}")
        return reservation

    def cancel_reservation(self, db: Session, reservation_id: int) -> ClassReservation:
        """Cancelar; repetir la cancelación no hace nada."""
        return self._transition(db, reservation_id, ReservationStatus.CANCELLED)

    def check_in(self, db: Session, reservation_id: int) -> ClassReservation:
        """Marcar asistencia; repetir el check-in no hace nada."""
        return self._transition(db, reservation_id, ReservationStatus.CHECKED_IN)

    def count_active(self, db: Session, *, class_id: int, reservation_date: date) -> int:
        return class_reservation_repository.count_active(
            db, class_id=class_id, reservation_date=reservation_date
        )

    def get_occurrence_reservations(
        self, db: Session, *, class_id: int, reservation_date: date
    ) -> OccurrenceReservations:
        """
        Asistentes (reservas no canceladas) de una ocurrencia con su nombre visible.
        """
        template = class_template_repository.get(db, class_id)
        if not template:
            raise NotFoundError(f"Clase {class_id} no encontrada")

        rows = class_reservation_repository.get_occurrence_reservations(
            db, class_id=class_id, reservation_date=reservation_date
        )
        reservations = [
            OccurrenceReservation.model_validate(
                {**self._as_dict(reservation), "member_name": member.display_name}
            )
            for reservation, member in rows
        ]
        active_count = len(reservations)
        spots_left = None
        if template.max_capacity is not None:
            spots_left = max(template.max_capacity - active_count, 0)
        return OccurrenceReservations(
            class_id=class_id,
            reservation_date=reservation_date,
            max_capacity=template.max_capacity,
            active_count=active_count,
            spots_left=spots_left,
            reservations=reservations,
        )

    @staticmethod
    def _as_dict(reservation: ClassReservation) -> dict:
        return {
            "id": reservation.id,
            "member_id": reservation.member_id,
            "class_id": reservation.class_id,
            "reservation_date": reservation.reservation_date,
            "status": reservation.status,
            "created_at": reservation.created_at,
            "cancelled_at": reservation.cancelled_at,
            "checked_in_at": reservation.checked_in_at,
        }

    def get_member_reservations(
        self,
        db: Session,
        *,
        member_id: int,
        on_date: Optional[date] = None,
        include_cancelled: bool = True,
        skip: int = 0,
        limit: int = 100
    ) -> List[ClassReservation]:
        if not user_repository.exists(db, member_id):
            raise NotFoundError(f"Miembro {member_id} no encontrado")
        return class_reservation_repository.get_member_reservations(
            db,
            member_id=member_id,
            on_date=on_date,
            include_cancelled=include_cancelled,
            skip=skip,
            limit=limit,
        )


reservation_service = ReservationService()
