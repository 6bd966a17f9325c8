from typing import Iterable, List, Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from app.models.user import User, UserRole
from app.repositories.base import BaseRepository
from app.schemas.user import MemberBase


class UserRepository(BaseRepository[User, MemberBase, MemberBase]):
    def get_directory(
        self,
        db: Session,
        *,
        roles: Optional[Iterable[UserRole]] = None,
        active_only: bool = True,
        search: Optional[str] = None,
        skip: int = 0,
        limit: int = 100
    ) -> List[User]:
        """
        Listar miembros del directorio filtrando por rol, estado y texto libre.

        Args:
            db: Sesión de base de datos
            roles: Roles a incluir (None = todos)
            active_only: Excluir usuarios desactivados
            search: Texto a buscar en nombre, apellido o email
            skip: Número de registros a omitir
            limit: Número máximo de registros a devolver

        Returns:
            Lista de usuarios ordenada por nombre
        """
        query = db.query(User)
        if roles:
            query = query.filter(User.role.in_(list(roles)))
        if active_only:
            query = query.filter(User.is_active.is_(True))
        if search:
            pattern = f"%{search.strip()}%"
            query = query.filter(or_(
                User.first_name.ilike(pattern),
                User.last_name.ilike(pattern),
                User.email.ilike(pattern),
            ))
        return (
            query.order_by(User.first_name, User.last_name, User.id)
            .offset(skip)
            .limit(limit)
            .all()
        )


user_repository = UserRepository(User)
