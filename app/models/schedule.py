from sqlalchemy import Column, Integer, String, Boolean, ForeignKey, Time, DateTime, CheckConstraint, Date, Index
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship

from app.db.base_class import Base


class ClassTemplate(Base):
    """
    Definición de una clase recurrente o puntual.

    Las ocurrencias no se guardan: se derivan de esta fila cada vez que se
    evalúa una fecha (ver app.services.occurrence).
    """
    __tablename__ = "class_template"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    discipline_id = Column(Integer, ForeignKey("discipline.id"), nullable=False, index=True)
    coach_id = Column(Integer, ForeignKey("user.id"), nullable=True)
    track_id = Column(Integer, ForeignKey("class_track.id"), nullable=True)
    room_id = Column(Integer, ForeignKey("room.id"), nullable=True, index=True)  # NULL = sin sala asignada

    day_of_week = Column(Integer, nullable=False)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)
    max_capacity = Column(Integer, nullable=True)  # NULL = sin límite

    # Ventana de recurrencia
    start_date = Column(Date, nullable=True)  # NULL solo en filas anteriores a la ventana de fechas
    recurrence_end_date = Column(Date, nullable=True)
    is_recurring = Column(Boolean, default=False, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)  # Soft delete

    # Relaciones
    discipline = relationship("Discipline", back_populates="classes")
    coach = relationship("User", back_populates="coached_classes")
    track = relationship("ClassTrack", back_populates="classes")
    room = relationship("Room", back_populates="classes")
    reservations = relationship(
        "ClassReservation",
        back_populates="class_template",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    # Campos de auditoría
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    __table_args__ = (
        CheckConstraint('day_of_week >= 0 AND day_of_week <= 6', name='valid_day_of_week'),
        CheckConstraint('start_time < end_time', name='start_before_end'),
        CheckConstraint('max_capacity IS NULL OR max_capacity > 0', name='positive_max_capacity'),
        Index('ix_class_template_active_day', 'is_active', 'day_of_week'),
    )

    def __repr__(self) -> str:
        return (
            f"<ClassTemplate(id={self.id}, name='{self.name}', day={self.day_of_week}, "
            f"time={self.start_time}-{self.end_time}, room={self.room_id}, active={self.is_active})>"
        )
