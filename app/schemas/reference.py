from typing import Optional
from datetime import datetime
from pydantic import BaseModel, Field

HEX_COLOR_PATTERN = r"^#[0-9A-Fa-f]{6}$"


# Room schemas
class RoomBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = None
    color: Optional[str] = Field(None, pattern=HEX_COLOR_PATTERN)
    capacity: Optional[int] = Field(None, gt=0, description="Aforo físico de la sala (informativo)")
    sort_order: int = 0
    is_active: bool = True


class RoomCreate(RoomBase):
    pass


class RoomUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = None
    color: Optional[str] = Field(None, pattern=HEX_COLOR_PATTERN)
    capacity: Optional[int] = Field(None, gt=0)
    sort_order: Optional[int] = None
    is_active: Optional[bool] = None


class Room(RoomBase):
    id: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


# Discipline schemas
class DisciplineBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    slug: str = Field(..., min_length=1, max_length=100, pattern=r"^[a-z0-9]+(?:-[a-z0-9]+)*$")
    color: Optional[str] = Field(None, pattern=HEX_COLOR_PATTERN)
    sort_order: int = 0
    is_active: bool = True


class DisciplineCreate(DisciplineBase):
    pass


class DisciplineUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    color: Optional[str] = Field(None, pattern=HEX_COLOR_PATTERN)
    sort_order: Optional[int] = None
    is_active: Optional[bool] = None
    # El slug no se cambia una vez creado


class Discipline(DisciplineBase):
    id: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


# ClassTrack schemas
class ClassTrackBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = None
    color: Optional[str] = Field(None, pattern=HEX_COLOR_PATTERN)
    sort_order: int = 0
    is_active: bool = True


class ClassTrackCreate(ClassTrackBase):
    pass


class ClassTrackUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = None
    color: Optional[str] = Field(None, pattern=HEX_COLOR_PATTERN)
    sort_order: Optional[int] = None
    is_active: Optional[bool] = None


class ClassTrack(ClassTrackBase):
    id: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}
