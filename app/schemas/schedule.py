from typing import Optional, List
from pydantic import BaseModel, Field, field_validator, model_validator
from datetime import datetime, time, date


# ClassTemplate schemas
class ClassTemplateBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    discipline_id: int
    coach_id: Optional[int] = None
    track_id: Optional[int] = None
    room_id: Optional[int] = Field(None, description="None = clase sin sala asignada")
    day_of_week: int = Field(..., ge=0, le=6, description="0 = domingo ... 6 = sábado")
    start_time: time
    end_time: time
    max_capacity: Optional[int] = Field(None, gt=0, description="None = sin límite de plazas")
    start_date: Optional[date] = Field(None, description="Primer día visible de la clase")
    recurrence_end_date: Optional[date] = None
    is_recurring: bool = False
    is_active: bool = True

    @model_validator(mode='after')
    def check_window(self):
        if self.end_time <= self.start_time:
            raise ValueError('end_time debe ser posterior a start_time')
        if (
            self.start_date is not None
            and self.recurrence_end_date is not None
            and self.recurrence_end_date < self.start_date
        ):
            raise ValueError('recurrence_end_date no puede ser anterior a start_date')
        return self


class ClassTemplateCreate(ClassTemplateBase):
    pass


class ClassTemplateUpdate(BaseModel):
    """Actualización parcial; la coherencia de horas y fechas se revalida en el servicio"""
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    discipline_id: Optional[int] = None
    coach_id: Optional[int] = None
    track_id: Optional[int] = None
    room_id: Optional[int] = None
    day_of_week: Optional[int] = Field(None, ge=0, le=6)
    start_time: Optional[time] = None
    end_time: Optional[time] = None
    max_capacity: Optional[int] = Field(None, gt=0)
    start_date: Optional[date] = None
    recurrence_end_date: Optional[date] = None
    is_recurring: Optional[bool] = None
    is_active: Optional[bool] = None

    # Columnas NOT NULL: omitirlas es válido, enviarlas a null no
    @field_validator(
        'name', 'discipline_id', 'day_of_week', 'start_time', 'end_time',
        'is_recurring', 'is_active',
    )
    @classmethod
    def required_not_null(cls, v, info):
        if v is None:
            raise ValueError(f'{info.field_name} no puede ser null')
        return v


class ClassTemplate(ClassTemplateBase):
    id: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    occurrence_count: Optional[int] = Field(
        None, description="Número estimado de ocurrencias en toda la ventana de recurrencia"
    )
    data_issue: Optional[str] = Field(
        None, description="Motivo por el que la plantilla produce menos ocurrencias de lo esperado"
    )

    model_config = {"from_attributes": True}


# Drag-and-drop
class ClassReassign(BaseModel):
    day_of_week: int
    room_id: Optional[int] = None


class ReassignmentImpact(BaseModel):
    past_occurrences: int = 0
    future_occurrences: int = 0
    orphaned_reservations: int = Field(
        0, description="Reservas activas cuya fecha deja de caer en el nuevo día de la semana"
    )
    one_time_date_mismatch: bool = False

    model_config = {"from_attributes": True}


class ReassignmentResponse(BaseModel):
    template: ClassTemplate
    impact: ReassignmentImpact


# Selección múltiple
class BulkDeleteRequest(BaseModel):
    template_ids: List[int] = Field(default_factory=list)

    @field_validator('template_ids')
    @classmethod
    def dedupe_ids(cls, v):
        return list(dict.fromkeys(v))


class BulkDeleteResponse(BaseModel):
    deleted_count: int


class OccurrenceDates(BaseModel):
    class_id: int
    start_date: date
    end_date: date
    dates: List[date]
    count: int
