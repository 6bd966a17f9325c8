from sqlalchemy import Column, Integer, String, Boolean, DateTime, Text, CheckConstraint
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship

from app.db.base_class import Base


class Room(Base):
    """Salas del gimnasio; cada una es una columna en la rejilla de horarios"""
    __tablename__ = "room"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    color = Column(String(7), nullable=True)  # Código de color para mostrar en UI
    capacity = Column(Integer, nullable=True)  # Aforo físico de la sala (informativo)
    sort_order = Column(Integer, default=0, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)

    # Relaciones
    classes = relationship("ClassTemplate", back_populates="room")

    # Campos de auditoría
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    __table_args__ = (
        CheckConstraint('capacity IS NULL OR capacity > 0', name='room_positive_capacity'),
    )


class Discipline(Base):
    """Disciplinas (BJJ, Muay Thai, ...) a las que pertenece cada clase"""
    __tablename__ = "discipline"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    slug = Column(String, unique=True, index=True, nullable=False)
    color = Column(String(7), nullable=True)
    sort_order = Column(Integer, default=0, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)

    classes = relationship("ClassTemplate", back_populates="discipline")

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())


class ClassTrack(Base):
    """Agrupa clases por público objetivo (kids, competición, ...)"""
    __tablename__ = "class_track"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    color = Column(String(7), nullable=True)
    sort_order = Column(Integer, default=0, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)

    classes = relationship("ClassTemplate", back_populates="track")

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())
