"""
Utilidades para el manejo de zonas horarias en el sistema.
"""
from datetime import date, datetime, timezone
from typing import Optional
import pytz

from app.core.config import get_settings


def resolve_gym_timezone(gym_timezone: Optional[str] = None) -> str:
    """Devuelve la zona horaria indicada o la configurada para el gimnasio."""
    return gym_timezone or get_settings().GYM_TIMEZONE


def get_current_time_in_gym_timezone(gym_timezone: Optional[str] = None) -> datetime:
    """
    Obtiene la hora actual en la zona horaria del gimnasio.

    Args:
        gym_timezone: Zona horaria del gimnasio (por defecto GYM_TIMEZONE)

    Returns:
        Datetime aware representando la hora actual en la zona horaria del gimnasio
    """
    utc_now = datetime.now(timezone.utc)
    tz = pytz.timezone(resolve_gym_timezone(gym_timezone))
    return utc_now.astimezone(tz)


def get_today_in_gym_timezone(gym_timezone: Optional[str] = None) -> date:
    """
    Fecha de calendario actual para el gimnasio.

    Las ocurrencias de clase son fechas locales, así que "hoy" siempre se
    calcula en la zona del gimnasio y nunca en UTC.
    """
    return get_current_time_in_gym_timezone(gym_timezone).date()
