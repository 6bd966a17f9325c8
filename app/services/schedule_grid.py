"""
Rejilla de horarios (día / semana / mes) construida a partir de plantillas.

`build_grid` es una función pura: recibe plantillas, salas y conteos de
reservas ya cargados y devuelve siempre la misma estructura para la misma
entrada. `ScheduleGridService` es la capa fina que carga esos datos de la BD.
"""
import datetime
import enum
import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from sqlalchemy.orm import Session

from app.core.config import get_settings
from app.core.exceptions import InvalidRangeError
from app.core.timezone_utils import get_today_in_gym_timezone
from app.repositories.reference import room_repository
from app.repositories.reservation import class_reservation_repository
from app.repositories.schedule import class_template_repository
from app.services.occurrence import occurrence_issue, occurs_on, weekday_index

logger = logging.getLogger(__name__)

DEFAULT_MONTH_LIMIT = 3
DEFAULT_MAX_RANGE_DAYS = 366


class ViewMode(str, enum.Enum):
    DAY = "day"
    WEEK = "week"
    MONTH = "month"


@dataclass(frozen=True)
class GridRoom:
    id: int
    name: str
    color: Optional[str] = None
    sort_order: int = 0


@dataclass(frozen=True)
class GridOccurrence:
    class_id: int
    name: str
    date: datetime.date
    start_time: datetime.time
    end_time: datetime.time
    room_id: Optional[int]
    discipline_id: int
    coach_id: Optional[int] = None
    track_id: Optional[int] = None
    max_capacity: Optional[int] = None
    reserved_count: int = 0
    spots_left: Optional[int] = None


@dataclass
class GridCell:
    room_id: Optional[int]
    occurrences: List[GridOccurrence] = field(default_factory=list)
    # Clases sin sala; solo se cuelgan de la primera columna para pintarlas
    unassigned: List[GridOccurrence] = field(default_factory=list)
    overflow_count: int = 0


@dataclass
class GridDay:
    date: datetime.date
    weekday: int
    is_today: bool
    cells: List[GridCell] = field(default_factory=list)
    total_occurrences: int = 0


@dataclass
class ScheduleGrid:
    view_mode: str
    start_date: datetime.date
    end_date: datetime.date
    room_filter: Optional[int] = None
    rooms: List[GridRoom] = field(default_factory=list)
    days: List[GridDay] = field(default_factory=list)


def parse_view_mode(view_mode) -> ViewMode:
    try:
        return ViewMode(view_mode)
    except ValueError:
        raise InvalidRangeError(
            f"Modo de vista desconocido: {view_mode!r} (usar day, week o month)"
        )


def validate_range(
    start_date: datetime.date,
    end_date: datetime.date,
    max_range_days: int = DEFAULT_MAX_RANGE_DAYS,
) -> None:
    if start_date > end_date:
        raise InvalidRangeError(
            f"Rango inválido: {start_date.isoformat()} es posterior a {end_date.isoformat()}"
        )
    span = (end_date - start_date).days + 1
    if span > max_range_days:
        raise InvalidRangeError(
            f"El rango de {span} días supera el máximo permitido ({max_range_days})"
        )


def default_range(anchor: datetime.date, view_mode) -> Tuple[datetime.date, datetime.date]:
    """
    Rango visible por defecto para una fecha ancla.

    day -> [anchor, anchor]; week -> lunes a domingo; month -> mes natural completo.
    """
    mode = parse_view_mode(view_mode)
    if mode == ViewMode.DAY:
        return anchor, anchor
    if mode == ViewMode.WEEK:
        monday = anchor - datetime.timedelta(days=anchor.weekday())
        return monday, monday + datetime.timedelta(days=6)
    first = anchor.replace(day=1)
    next_month = (first + datetime.timedelta(days=32)).replace(day=1)
    return first, next_month - datetime.timedelta(days=1)


def _to_grid_room(room) -> GridRoom:
    return GridRoom(
        id=room.id,
        name=room.name,
        color=getattr(room, "color", None),
        sort_order=getattr(room, "sort_order", 0) or 0,
    )


def _to_occurrence(template, day: datetime.date, reserved_count: int) -> GridOccurrence:
    spots_left = None
    if template.max_capacity is not None:
        spots_left = max(template.max_capacity - reserved_count, 0)
    return GridOccurrence(
        class_id=template.id,
        name=template.name,
        date=day,
        start_time=template.start_time,
        end_time=template.end_time,
        room_id=template.room_id,
        discipline_id=template.discipline_id,
        coach_id=template.coach_id,
        track_id=template.track_id,
        max_capacity=template.max_capacity,
        reserved_count=reserved_count,
        spots_left=spots_left,
    )


def _iter_dates(start_date: datetime.date, end_date: datetime.date) -> Iterable[datetime.date]:
    current = start_date
    while current <= end_date:
        yield current
        current += datetime.timedelta(days=1)


def build_grid(
    templates: Sequence,
    start_date: datetime.date,
    end_date: datetime.date,
    view_mode,
    room_filter: Optional[int] = None,
    rooms: Sequence = (),
    reservation_counts: Optional[Mapping[Tuple[int, datetime.date], int]] = None,
    month_limit: int = DEFAULT_MONTH_LIMIT,
    today: Optional[datetime.date] = None,
    max_range_days: int = DEFAULT_MAX_RANGE_DAYS,
) -> ScheduleGrid:
    """
    Agrupa las ocurrencias del rango por día y sala.

    Args:
        templates: Plantillas candidatas (las inactivas se descartan aquí)
        start_date: Primer día del rango (inclusive)
        end_date: Último día del rango (inclusive)
        view_mode: "day", "week" o "month"
        room_filter: Mostrar solo las clases de esta sala
        rooms: Salas a usar como columnas
        reservation_counts: Reservas vivas por (class_id, fecha)
        month_limit: Máximo de clases visibles por día en la vista mensual
        today: Fecha a marcar como hoy
        max_range_days: Tamaño máximo del rango

    Returns:
        ScheduleGrid con un GridDay por fecha del rango

    Raises:
        InvalidRangeError: Rango invertido, demasiado grande o vista desconocida
    """
    mode = parse_view_mode(view_mode)
    validate_range(start_date, end_date, max_range_days)
    counts = reservation_counts or {}

    grid_rooms = sorted((_to_grid_room(room) for room in rooms), key=lambda r: (r.sort_order, r.name, r.id))
    room_ids = [room.id for room in grid_rooms]
    known_rooms = set(room_ids)

    # Orden estable: hora de inicio y luego id
    ordered = sorted(templates, key=lambda t: (t.start_time, t.id))
    if room_filter is not None:
        ordered = [t for t in ordered if t.room_id == room_filter]

    days = []
    for day in _iter_dates(start_date, end_date):
        occurrences = [
            _to_occurrence(t, day, counts.get((t.id, day), 0))
            for t in ordered
            if occurs_on(t, day)
        ]
        days.append(GridDay(
            date=day,
            weekday=weekday_index(day),
            is_today=today is not None and day == today,
            cells=_build_cells(occurrences, mode, room_filter, room_ids, known_rooms, month_limit),
            total_occurrences=len(occurrences),
        ))

    return ScheduleGrid(
        view_mode=mode.value,
        start_date=start_date,
        end_date=end_date,
        room_filter=room_filter,
        rooms=grid_rooms,
        days=days,
    )


def _build_cells(
    occurrences: List[GridOccurrence],
    mode: ViewMode,
    room_filter: Optional[int],
    room_ids: List[int],
    known_rooms: set,
    month_limit: int,
) -> List[GridCell]:
    if mode == ViewMode.MONTH:
        visible = occurrences[:month_limit]
        return [GridCell(
            room_id=room_filter,
            occurrences=visible,
            overflow_count=len(occurrences) - len(visible),
        )]

    if room_filter is not None or not room_ids:
        return [GridCell(room_id=room_filter, occurrences=occurrences)]

    by_room: Dict[int, List[GridOccurrence]] = {room_id: [] for room_id in room_ids}
    unassigned = []
    for occurrence in occurrences:
        if occurrence.room_id in known_rooms:
            by_room[occurrence.room_id].append(occurrence)
        else:
            unassigned.append(occurrence)

    cells = [GridCell(room_id=room_id, occurrences=by_room[room_id]) for room_id in room_ids]
    cells[0].unassigned = unassigned
    return cells


class ScheduleGridService:
    def get_grid(
        self,
        db: Session,
        *,
        view_mode: str = ViewMode.WEEK.value,
        anchor: Optional[datetime.date] = None,
        start_date: Optional[datetime.date] = None,
        end_date: Optional[datetime.date] = None,
        room_id: Optional[int] = None
    ) -> ScheduleGrid:
        """
        Cargar plantillas, salas y reservas del rango y construir la rejilla.

        Si no se pasan start_date y end_date se usa el rango por defecto de la
        vista alrededor de `anchor` (hoy en la zona horaria del gimnasio).
        """
        settings = get_settings()
        mode = parse_view_mode(view_mode)
        today = get_today_in_gym_timezone()

        if start_date is None and end_date is None:
            start_date, end_date = default_range(anchor or today, mode)
        elif start_date is None or end_date is None:
            raise InvalidRangeError("start_date y end_date deben indicarse juntos")
        validate_range(start_date, end_date, settings.SCHEDULE_MAX_RANGE_DAYS)

        templates = class_template_repository.get_filtered(db, active_only=True, room_id=room_id)
        for template in templates:
            issue = occurrence_issue(template)
            if issue:
                logger.warning(
                    f"Plantilla {template.id} ('{template.name}') con datos incompletos: {issue}"
                )

        rooms = room_repository.get_ordered(db, active_only=True)
        counts = class_reservation_repository.count_active_in_range(
            db,
            class_ids=[t.id for t in templates],
            start_date=start_date,
            end_date=end_date,
        )
        logger.debug(
            f"Rejilla {mode.value} {start_date}..{end_date}: {len(templates)} plantillas, "
            f"{len(rooms)} salas, filtro sala={room_id}"
        )
        return build_grid(
            templates,
            start_date,
            end_date,
            mode,
            room_filter=room_id,
            rooms=rooms,
            reservation_counts=counts,
            month_limit=settings.SCHEDULE_MONTH_VIEW_LIMIT,
            today=today,
            max_range_days=settings.SCHEDULE_MAX_RANGE_DAYS,
        )


schedule_grid_service = ScheduleGridService()
