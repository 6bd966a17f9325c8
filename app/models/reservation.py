from sqlalchemy import Column, Integer, ForeignKey, DateTime, Date, Enum, Index, text
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
import enum

from app.db.base_class import Base


class ReservationStatus(str, enum.Enum):
    RESERVED = "reserved"
    CHECKED_IN = "checked_in"
    CANCELLED = "cancelled"


class ClassReservation(Base):
    """Inscripción de un miembro en una ocurrencia concreta (clase, fecha)"""
    __tablename__ = "class_reservation"

    id = Column(Integer, primary_key=True, index=True)
    member_id = Column(Integer, ForeignKey("user.id"), nullable=False, index=True)
    class_id = Column(Integer, ForeignKey("class_template.id", ondelete="CASCADE"), nullable=False)
    reservation_date = Column(Date, nullable=False)
    # Se guarda el valor ("reserved"), no el nombre, para poder usarlo en el índice parcial
    status = Column(
        Enum(
            ReservationStatus,
            name="reservation_status",
            values_callable=lambda enum_cls: [member.value for member in enum_cls],
        ),
        default=ReservationStatus.RESERVED,
        nullable=False,
    )
    cancelled_at = Column(DateTime(timezone=True), nullable=True)
    checked_in_at = Column(DateTime(timezone=True), nullable=True)

    # Relaciones
    member = relationship("User", back_populates="reservations")
    class_template = relationship("ClassTemplate", back_populates="reservations")

    # Campos de auditoría
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    __table_args__ = (
        # Conteo de plazas por ocurrencia
        Index('ix_class_reservation_occurrence', 'class_id', 'reservation_date', 'status'),
        # Un miembro solo puede tener una reserva viva por ocurrencia
        Index(
            'uq_class_reservation_active_member',
            'member_id', 'class_id', 'reservation_date',
            unique=True,
            postgresql_where=text("status <> 'cancelled'"),
            sqlite_where=text("status <> 'cancelled'"),
        ),
    )
