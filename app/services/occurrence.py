"""
Resolución de ocurrencias virtuales.

Una plantilla de clase no guarda sus instancias: cada ocurrencia es el par
(plantilla, fecha) y se recalcula cada vez que se evalúa una fecha. Todas las
funciones de este módulo son puras, no hacen I/O y nunca lanzan excepciones
salvo `occurrence_dates` ante un rango invertido.

Convención de día de la semana: 0 = domingo ... 6 = sábado.
"""
from datetime import date, timedelta
from typing import List, Optional, Protocol

from app.core.exceptions import InvalidRangeError

MISSING_START_DATE = "missing_start_date"
RECURRING_WITHOUT_END_DATE = "recurring_without_end_date"
START_DATE_WEEKDAY_MISMATCH = "start_date_weekday_mismatch"


class TemplateLike(Protocol):
    day_of_week: int
    start_date: Optional[date]
    recurrence_end_date: Optional[date]
    is_recurring: bool
    is_active: bool


def weekday_index(day: date) -> int:
    """Día de la semana con domingo = 0."""
    return day.isoweekday() % 7


def is_occurrence_active(template: TemplateLike, day: date) -> bool:
    """
    Decide si la fecha cae dentro de la ventana de recurrencia de la plantilla.

    No comprueba el día de la semana: quien llama debe filtrar antes por
    `weekday_index(day) == template.day_of_week` (ver `occurs_on`).

    - Sin start_date no hay ocurrencias (filas anteriores a la ventana de fechas).
    - Sin recurrence_end_date una clase puntual solo existe en start_date y una
      serie recurrente se considera incompleta, no infinita.
    """
    start_date = template.start_date
    if start_date is None:
        return False
    if day < start_date:
        return False

    end_date = template.recurrence_end_date
    if end_date is None:
        if not template.is_recurring:
            return day == start_date
        return False

    if day > end_date:
        return False
    return True


def occurs_on(template: TemplateLike, day: date) -> bool:
    """Plantilla activa, mismo día de la semana y fecha dentro de la ventana."""
    if not template.is_active:
        return False
    if weekday_index(day) != template.day_of_week:
        return False
    return is_occurrence_active(template, day)


def first_matching_date(day_of_week: int, on_or_after: date) -> date:
    """Primera fecha >= on_or_after cuyo día de la semana es day_of_week."""
    offset = (day_of_week - weekday_index(on_or_after)) % 7
    return on_or_after + timedelta(days=offset)


def occurrence_dates(template: TemplateLike, start_date: date, end_date: date) -> List[date]:
    """
    Fechas del rango [start_date, end_date] en las que la plantilla tiene ocurrencia.

    Raises:
        InvalidRangeError: Si start_date > end_date
    """
    if start_date > end_date:
        raise InvalidRangeError(
            f"Rango inválido: {start_date.isoformat()} es posterior a {end_date.isoformat()}"
        )
    if template.start_date is None:
        return []

    # Recortar a la ventana de la plantilla antes de iterar
    lower = max(start_date, template.start_date)
    upper = end_date
    if template.recurrence_end_date is not None:
        upper = min(upper, template.recurrence_end_date)
    if lower > upper:
        return []

    # Desplazamientos desde lower; nunca se construye una fecha posterior a upper
    first_offset = (template.day_of_week - weekday_index(lower)) % 7
    dates = []
    for offset in range(first_offset, (upper - lower).days + 1, 7):
        current = lower + timedelta(days=offset)
        if occurs_on(template, current):
            dates.append(current)
    return dates


def count_occurrences(template: TemplateLike) -> int:
    """
    Número de ocurrencias en toda la ventana (la estimación "~X instancias").

    Las series incompletas devuelven 0.
    """
    start_date = template.start_date
    if start_date is None:
        return 0
    end_date = template.recurrence_end_date
    if end_date is None:
        end_date = start_date
    if end_date < start_date:
        return 0
    return len(occurrence_dates(template, start_date, end_date))


def occurrence_issue(template: TemplateLike) -> Optional[str]:
    """
    Motivo de calidad de datos por el que la plantilla produce menos ocurrencias
    de lo que su autor probablemente esperaba, o None si está bien formada.

    Los servicios lo registran como WARNING; nunca se lanza como error.
    """
    if template.start_date is None:
        return MISSING_START_DATE
    if template.is_recurring and template.recurrence_end_date is None:
        return RECURRING_WITHOUT_END_DATE
    # Una serie recurrente con otro día de inicio sigue produciendo ocurrencias
    if not template.is_recurring and weekday_index(template.start_date) != template.day_of_week:
        return START_DATE_WEEKDAY_MISMATCH
    return None
