from typing import Dict, Iterable, List, Optional, Tuple
from datetime import date, datetime, timezone

from sqlalchemy import Date, Integer, String, and_, cast, func, insert, literal, select, update
from sqlalchemy.orm import Session

from app.models.reservation import ClassReservation, ReservationStatus
from app.models.schedule import ClassTemplate
from app.models.user import User
from app.repositories.base import BaseRepository
from app.schemas.reservation import ReservationCreate

# Las reservas vivas son todas las que no están canceladas
ACTIVE_FILTER = ClassReservation.status != ReservationStatus.CANCELLED


class ClassReservationRepository(BaseRepository[ClassReservation, ReservationCreate, ReservationCreate]):
    def lock_template(self, db: Session, *, class_id: int) -> Optional[int]:
        """
        Bloquear la fila de la plantilla (SELECT ... FOR UPDATE).

        En PostgreSQL serializa las reservas concurrentes de una misma clase;
        SQLite ignora el FOR UPDATE y serializa con su lock de escritura.
        """
        stmt = select(ClassTemplate.id).where(ClassTemplate.id == class_id).with_for_update()
        return db.execute(stmt).scalar_one_or_none()

    def insert_if_available(
        self,
        db: Session,
        *,
        member_id: int,
        class_id: int,
        reservation_date: date,
        max_capacity: Optional[int]
    ) -> int:
        """
        INSERT ... SELECT ... WHERE condicionado al aforo y a la ausencia de duplicados.

        El recuento y la inserción son una sola sentencia, así que no hay ventana
        entre leer el número de plazas ocupadas y escribir la reserva. No hace commit.

        Returns:
            Número de filas insertadas (0 si la guarda falló)
        """
        same_occurrence = and_(
            ClassReservation.class_id == class_id,
            ClassReservation.reservation_date == reservation_date,
            ACTIVE_FILTER,
        )
        duplicate = (
            select(ClassReservation.id)
            .where(same_occurrence, ClassReservation.member_id == member_id)
            .correlate(None)
            .exists()
        )
        guards = [~duplicate]
        if max_capacity is not None:
            active_count = (
                select(func.count(ClassReservation.id))
                .where(same_occurrence)
                .correlate(None)
                .scalar_subquery()
            )
            guards.append(active_count < max_capacity)

        status_type = ClassReservation.__table__.c.status.type
        source = select(
            literal(member_id, Integer),
            literal(class_id, Integer),
            literal(reservation_date, Date),
            cast(literal(ReservationStatus.RESERVED.value, String), status_type),
        ).where(and_(*guards))

        table = ClassReservation.__table__
        stmt = insert(table).from_select(
            [table.c.member_id, table.c.class_id, table.c.reservation_date, table.c.status],
            source,
        )
        result = db.execute(stmt)
        return result.rowcount or 0

    def get_active_for_member(
        self, db: Session, *, member_id: int, class_id: int, reservation_date: date
    ) -> Optional[ClassReservation]:
        return (
            db.query(ClassReservation)
            .filter(
                ClassReservation.member_id == member_id,
                ClassReservation.class_id == class_id,
                ClassReservation.reservation_date == reservation_date,
                ACTIVE_FILTER,
            )
            .first()
        )

    def transition(
        self, db: Session, *, reservation_id: int, target: ReservationStatus
    ) -> int:
        """
        UPDATE condicional: solo pasa a `target` si la reserva sigue en estado reserved.

        Returns:
            Filas afectadas (0 si otro proceso ya la movió a un estado terminal)
        """
        now = datetime.now(timezone.utc)
        values = {"status": target, "updated_at": now}
        if target == ReservationStatus.CHECKED_IN:
            values["checked_in_at"] = now
        elif target == ReservationStatus.CANCELLED:
            values["cancelled_at"] = now

        stmt = (
            update(ClassReservation)
            .where(
                ClassReservation.id == reservation_id,
                ClassReservation.status == ReservationStatus.RESERVED,
            )
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        result = db.execute(stmt)
        db.commit()
        return result.rowcount or 0

    def count_active(self, db: Session, *, class_id: int, reservation_date: date) -> int:
        """
        Número de reservas no canceladas de una ocurrencia.
        """
        stmt = select(func.count(ClassReservation.id)).where(
            ClassReservation.class_id == class_id,
            ClassReservation.reservation_date == reservation_date,
            ACTIVE_FILTER,
        )
        return db.execute(stmt).scalar_one()

    def count_active_in_range(
        self, db: Session, *, class_ids: Iterable[int], start_date: date, end_date: date
    ) -> Dict[Tuple[int, date], int]:
        """
        Conteo agrupado por (clase, fecha) para pintar las plazas en la rejilla.
        """
        class_ids = list(class_ids)
        if not class_ids:
            return {}
        stmt = (
            select(
                ClassReservation.class_id,
                ClassReservation.reservation_date,
                func.count(ClassReservation.id),
            )
            .where(
                ClassReservation.class_id.in_(class_ids),
                ClassReservation.reservation_date >= start_date,
                ClassReservation.reservation_date <= end_date,
                ACTIVE_FILTER,
            )
            .group_by(ClassReservation.class_id, ClassReservation.reservation_date)
        )
        return {(class_id, day): count for class_id, day, count in db.execute(stmt).all()}

    def get_active_dates(self, db: Session, *, class_id: int) -> List[date]:
        """
        Fechas de todas las reservas vivas de una plantilla (una entrada por reserva).
        """
        stmt = select(ClassReservation.reservation_date).where(
            ClassReservation.class_id == class_id,
            ACTIVE_FILTER,
        )
        return list(db.execute(stmt).scalars().all())

    def get_occurrence_reservations(
        self, db: Session, *, class_id: int, reservation_date: date
    ) -> List[Tuple[ClassReservation, User]]:
        return (
            db.query(ClassReservation, User)
            .join(User, User.id == ClassReservation.member_id)
            .filter(
                ClassReservation.class_id == class_id,
                ClassReservation.reservation_date == reservation_date,
                ACTIVE_FILTER,
            )
            .order_by(ClassReservation.created_at, ClassReservation.id)
            .all()
        )

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
        query = db.query(ClassReservation).filter(ClassReservation.member_id == member_id)
        if on_date is not None:
            query = query.filter(ClassReservation.reservation_date == on_date)
        if not include_cancelled:
            query = query.filter(ACTIVE_FILTER)
        return (
            query.order_by(ClassReservation.reservation_date, ClassReservation.id)
            .offset(skip)
            .limit(limit)
            .all()
        )


class_reservation_repository = ClassReservationRepository(ClassReservation)
