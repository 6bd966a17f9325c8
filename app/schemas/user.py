from typing import Optional
from datetime import datetime
from pydantic import BaseModel, EmailStr

from app.models.user import UserRole


# Propiedades compartidas
class MemberBase(BaseModel):
    email: EmailStr
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    role: UserRole = UserRole.MEMBER
    is_active: bool = True


# Propiedades para retornar a través de API
class Member(MemberBase):
    """Vista de solo lectura del directorio: lo justo para elegir coach o asistente"""
    id: int
    display_name: str
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}
