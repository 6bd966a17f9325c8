from sqlalchemy import Boolean, Column, Integer, String, DateTime, Enum
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
import enum

from app.db.base_class import Base


class UserRole(str, enum.Enum):
    ADMIN = "ADMIN"              # Administrador del gimnasio
    TRAINER = "TRAINER"          # Entrenador / coach
    MEMBER = "MEMBER"            # Miembro regular


class User(Base):
    """
    Vista mínima del directorio de miembros.

    El alta y edición de miembros pertenece a la aplicación que envuelve este
    núcleo; aquí solo se leen los campos necesarios para elegir coaches y
    asistentes.
    """
    __tablename__ = "user"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, unique=True, index=True, nullable=False)
    first_name = Column(String, index=True, nullable=True)
    last_name = Column(String, index=True, nullable=True)
    role = Column(Enum(UserRole), default=UserRole.MEMBER, nullable=False)
    is_active = Column(Boolean(), default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relaciones
    coached_classes = relationship("ClassTemplate", back_populates="coach")
    reservations = relationship("ClassReservation", back_populates="member")

    @property
    def display_name(self) -> str:
        full_name = " ".join(part for part in (self.first_name, self.last_name) if part)
        return full_name or self.email
