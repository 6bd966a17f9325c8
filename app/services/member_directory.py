from typing import List, Optional
import logging

from sqlalchemy.orm import Session

from app.core.exceptions import NotFoundError
from app.models.user import User, UserRole
from app.repositories.user import user_repository

logger = logging.getLogger(__name__)


class MemberDirectoryService:
    """Lectura del directorio de miembros para elegir coaches y asistentes."""

    def list_members(
        self,
        db: Session,
        *,
        role: Optional[UserRole] = None,
        active_only: bool = True,
        search: Optional[str] = None,
        skip: int = 0,
        limit: int = 100
    ) -> List[User]:
        return user_repository.get_directory(
            db,
            roles=[role] if role else None,
            active_only=active_only,
            search=search,
            skip=skip,
            limit=limit,
        )

    def list_coaches(self, db: Session, *, active_only: bool = True) -> List[User]:
        """Usuarios que pueden dar clase (TRAINER y ADMIN)."""
        return user_repository.get_directory(
            db,
            roles=[UserRole.TRAINER, UserRole.ADMIN],
            active_only=active_only,
            limit=1000,
        )

    def get_member(self, db: Session, member_id: int) -> User:
        member = user_repository.get(db, member_id)
        if not member:
            raise NotFoundError(f"Miembro {member_id} no encontrado")
        return member


member_directory_service = MemberDirectoryService()
