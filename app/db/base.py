# Importar todos los modelos para que Alembic los detecte
from app.db.base_class import Base  # noqa
from app.models.user import User  # noqa
from app.models.reference import Room, Discipline, ClassTrack  # noqa
from app.models.schedule import ClassTemplate  # noqa
from app.models.reservation import ClassReservation  # noqa
