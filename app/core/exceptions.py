"""
Errores de dominio del motor de horarios y reservas.

Los servicios lanzan estas excepciones; los endpoints las traducen a
HTTPException. El resolver de ocurrencias nunca lanza: la ausencia de una
ocurrencia es una respuesta válida, no un fallo.
"""


class ScheduleError(Exception):
    """Base para todos los errores del módulo de horarios."""
    pass


class NotFoundError(ScheduleError):
    """Raised when a template, reservation or reference row is not found."""
    pass


class OccurrenceNotFoundError(NotFoundError):
    """La clase no tiene una ocurrencia activa en la fecha pedida."""
    pass


class CapacityExceededError(ScheduleError):
    """La ocurrencia ya alcanzó su capacidad máxima."""
    pass


class DuplicateReservationError(ScheduleError):
    """El miembro ya tiene una reserva no cancelada para esa ocurrencia."""
    pass


class InvalidStatusTransitionError(ScheduleError):
    """Transición no permitida en la máquina de estados de la reserva."""
    pass


class InvalidRangeError(ScheduleError):
    """Rango horario o de fechas inválido (inicio >= fin, rango demasiado grande...)."""
    pass


class ScheduleValidationError(ScheduleError):
    """Raised when validation fails."""
    pass
