from typing import Any, Dict, Iterable, List, Optional, Tuple
from datetime import date
import logging

from sqlalchemy.orm import Session

from app.core.exceptions import InvalidRangeError, NotFoundError, ScheduleValidationError
from app.core.timezone_utils import get_today_in_gym_timezone
from app.models.schedule import ClassTemplate
from app.models.user import UserRole
from app.repositories.reference import (
    class_track_repository,
    discipline_repository,
    room_repository,
)
from app.repositories.reservation import class_reservation_repository
from app.repositories.schedule import class_template_repository
from app.repositories.user import user_repository
from app.schemas.schedule import (
    ClassTemplateCreate,
    ClassTemplateUpdate,
    ReassignmentImpact,
)
from app.services.occurrence import (
    first_matching_date,
    occurrence_dates,
    occurrence_issue,
    weekday_index,
)

logger = logging.getLogger(__name__)

COACH_ROLES = (UserRole.TRAINER, UserRole.ADMIN)


def _check_window(values: Dict[str, Any]) -> None:
    """Validar horas y ventana de fechas sobre los valores ya combinados."""
    start_time = values.get("start_time")
    end_time = values.get("end_time")
    if start_time is not None and end_time is not None and start_time >= end_time:
        raise InvalidRangeError(
            f"La hora de inicio ({start_time}) debe ser anterior a la de fin ({end_time})"
        )
    start_date = values.get("start_date")
    end_date = values.get("recurrence_end_date")
    if start_date is not None and end_date is not None and end_date < start_date:
        raise InvalidRangeError(
            f"recurrence_end_date ({end_date}) es anterior a start_date ({start_date})"
        )


def _check_day_of_week(day_of_week: Any) -> None:
    if not isinstance(day_of_week, int) or isinstance(day_of_week, bool) or not 0 <= day_of_week <= 6:
        raise ScheduleValidationError(
            f"day_of_week debe estar entre 0 (domingo) y 6 (sábado), recibido: {day_of_week!r}"
        )


class ClassTemplateService:
    """
    Operaciones sobre plantillas de clase.

    Las ocurrencias son virtuales: cualquier cambio en la fila afecta a todas
    sus ocurrencias pasadas y futuras.
    """

    def _check_references(self, db: Session, values: Dict[str, Any]) -> None:
        if "discipline_id" in values and not discipline_repository.exists(db, values["discipline_id"]):
            raise NotFoundError(f"Disciplina {values['discipline_id']} no encontrada")

        room_id = values.get("room_id")
        if room_id is not None and not room_repository.get_active(db, room_id):
            raise NotFoundError(f"Sala {room_id} no encontrada o inactiva")

        track_id = values.get("track_id")
        if track_id is not None and not class_track_repository.exists(db, track_id):
            raise NotFoundError(f"Track {track_id} no encontrado")

        coach_id = values.get("coach_id")
        if coach_id is not None:
            coach = user_repository.get(db, coach_id)
            if not coach:
                raise NotFoundError(f"Coach {coach_id} no encontrado")
            if coach.role not in COACH_ROLES:
                raise ScheduleValidationError(
                    f"El usuario {coach_id} no tiene rol de entrenador ({coach.role.value})"
                )

    def _log_issue(self, template: ClassTemplate) -> None:
        issue = occurrence_issue(template)
        if issue:
            logger.warning(f"Plantilla {template.id} ('{template.name}') con datos incompletos: {issue}")

    def create_template(self, db: Session, obj_in: ClassTemplateCreate) -> ClassTemplate:
        """
        Crear una plantilla de clase.

        Si no se indica start_date se usa el primer día, a partir de hoy en la zona
        horaria del gimnasio, que coincide con day_of_week.
        """
        values = obj_in.model_dump()
        _check_day_of_week(values["day_of_week"])
        _check_window(values)
        self._check_references(db, values)

        if values.get("start_date") is None:
            values["start_date"] = first_matching_date(
                values["day_of_week"], get_today_in_gym_timezone()
            )
            _check_window(values)

        template = class_template_repository.create(db, obj_in=values)
        logger.info(
            f"Plantilla {template.id} creada: '{template.name}' día={template.day_of_week} "
            f"{template.start_time}-{template.end_time} desde {template.start_date}"
        )
        self._log_issue(template)
        return template

    def get_template(self, db: Session, template_id: int) -> ClassTemplate:
        template = class_template_repository.get(db, template_id)
        if not template:
            raise NotFoundError(f"Clase {template_id} no encontrada")
        return template

    def list_templates(
        self,
        db: Session,
        *,
        active_only: bool = True,
        day_of_week: Optional[int] = None,
        room_id: Optional[int] = None,
        skip: int = 0,
        limit: Optional[int] = None
    ) -> List[ClassTemplate]:
        return class_template_repository.get_filtered(
            db,
            active_only=active_only,
            day_of_week=day_of_week,
            room_id=room_id,
            skip=skip,
            limit=limit,
        )

    def update_template(
        self, db: Session, template_id: int, obj_in: ClassTemplateUpdate
    ) -> ClassTemplate:
        """
        Actualización parcial. Horas y fechas se revalidan contra los valores
        resultantes, no solo contra los enviados.
        """
        template = self.get_template(db, template_id)
        update_data = obj_in.model_dump(exclude_unset=True)
        if not update_data:
            return template

        if "day_of_week" in update_data:
            _check_day_of_week(update_data["day_of_week"])
        merged = {
            "start_time": template.start_time,
            "end_time": template.end_time,
            "start_date": template.start_date,
            "recurrence_end_date": template.recurrence_end_date,
        }
        merged.update(update_data)
        _check_window(merged)
        self._check_references(db, update_data)

        template = class_template_repository.update(db, db_obj=template, obj_in=update_data)
        logger.info(f"Plantilla {template.id} actualizada: campos {sorted(update_data)}")
        self._log_issue(template)
        return template

    def delete_template(self, db: Session, template_id: int) -> ClassTemplate:
        """
        Borrado lógico: la fila sigue existiendo con is_active=False y deja de
        producir ocurrencias.
        """
        template = self.get_template(db, template_id)
        template = class_template_repository.update(db, db_obj=template, obj_in={"is_active": False})
        logger.info(f"Plantilla {template_id} desactivada")
        return template

    def bulk_delete(self, db: Session, template_ids: Iterable[int]) -> int:
        """
        Borrado físico de la selección, incluidas sus reservas.

        A diferencia de delete_template, las filas desaparecen. Los ids
        desconocidos se ignoran y una selección vacía no hace nada.

        Returns:
            Número de plantillas eliminadas
        """
        ids = list(dict.fromkeys(template_ids))
        if not ids:
            return 0
        deleted = class_template_repository.bulk_delete(db, ids=ids)
        logger.info(f"Borrado masivo: {deleted} de {len(ids)} plantillas eliminadas")
        return deleted

    def assess_reassignment(
        self,
        db: Session,
        template: ClassTemplate,
        new_day_of_week: int,
        new_room_id: Optional[int],
        today: Optional[date] = None
    ) -> ReassignmentImpact:
        """
        Calcular el alcance de mover la plantilla antes de escribir.

        Returns:
            ReassignmentImpact con las ocurrencias pasadas y futuras que cambian,
            las reservas vivas que quedan fuera del nuevo día y si una clase
            puntual deja de coincidir con su start_date
        """
        today = today or get_today_in_gym_timezone()

        dates: List[date] = []
        if template.start_date is not None:
            window_end = template.recurrence_end_date or template.start_date
            if window_end >= template.start_date:
                dates = occurrence_dates(template, template.start_date, window_end)
        past = sum(1 for d in dates if d < today)

        orphaned = 0
        if new_day_of_week != template.day_of_week:
            reserved_dates = class_reservation_repository.get_active_dates(db, class_id=template.id)
            orphaned = sum(1 for d in reserved_dates if weekday_index(d) != new_day_of_week)

        one_time_mismatch = (
            not template.is_recurring
            and template.start_date is not None
            and weekday_index(template.start_date) != new_day_of_week
        )
        return ReassignmentImpact(
            past_occurrences=past,
            future_occurrences=len(dates) - past,
            orphaned_reservations=orphaned,
            one_time_date_mismatch=one_time_mismatch,
        )

    def reassign_with_impact(
        self,
        db: Session,
        template_id: int,
        new_day_of_week: int,
        new_room_id: Optional[int]
    ) -> Tuple[ClassTemplate, ReassignmentImpact]:
        _check_day_of_week(new_day_of_week)
        template = self.get_template(db, template_id)
        if new_room_id is not None and not room_repository.get_active(db, new_room_id):
            raise NotFoundError(f"Sala {new_room_id} no encontrada o inactiva")

        impact = self.assess_reassignment(db, template, new_day_of_week, new_room_id)
        old_day, old_room = template.day_of_week, template.room_id
        template = class_template_repository.update_assignment(
            db, db_obj=template, day_of_week=new_day_of_week, room_id=new_room_id
        )
        logger.info(
            f"Plantilla {template_id} movida de día={old_day} sala={old_room} "
            f"a día={new_day_of_week} sala={new_room_id} "
            f"(pasadas={impact.past_occurrences}, futuras={impact.future_occurrences})"
        )
        if impact.orphaned_reservations:
            logger.warning(
                f"Plantilla {template_id}: {impact.orphaned_reservations} reservas activas "
                f"ya no coinciden con el día {new_day_of_week}"
            )
        if impact.one_time_date_mismatch:
            logger.warning(
                f"Plantilla {template_id}: clase puntual movida a un día distinto de su start_date"
            )
        return template, impact

    def reassign(
        self,
        db: Session,
        template_id: int,
        new_day_of_week: int,
        new_room_id: Optional[int]
    ) -> ClassTemplate:
        """
        Cambiar día de la semana y sala de la plantilla (drag-and-drop).

        El cambio es retroactivo para todas las ocurrencias. Sin bloqueo
        optimista: la última escritura gana.

        Raises:
            NotFoundError: Plantilla o sala inexistente
            ScheduleValidationError: day_of_week fuera de 0..6
        """
        template, _ = self.reassign_with_impact(db, template_id, new_day_of_week, new_room_id)
        return template


class_template_service = ClassTemplateService()
