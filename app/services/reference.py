from typing import Any, Generic, List, Optional, Type, TypeVar
import logging

from pydantic import BaseModel
from redis.asyncio import Redis
from sqlalchemy.orm import Session

from app.core.config import get_settings
from app.core.exceptions import NotFoundError, ScheduleValidationError
from app.repositories.base import SoftDeleteRepository
from app.repositories.reference import (
    class_track_repository,
    discipline_repository,
    room_repository,
)
from app.schemas.reference import (
    ClassTrack as ClassTrackSchema,
    Discipline as DisciplineSchema,
    DisciplineCreate,
    Room as RoomSchema,
)
from app.services.cache_service import cache_service

logger = logging.getLogger(__name__)

SchemaType = TypeVar("SchemaType", bound=BaseModel)


class ReferenceDataService(Generic[SchemaType]):
    """
    CRUD de tablas de referencia (salas, disciplinas, tracks).

    Los listados se cachean en Redis bajo `schedule:<namespace>:*` y cualquier
    escritura invalida ese patrón completo.
    """

    def __init__(self, repository: SoftDeleteRepository, schema: Type[SchemaType], namespace: str, label: str):
        self.repository = repository
        self.schema = schema
        self.namespace = namespace
        self.label = label

    async def _invalidate(self, redis_client: Optional[Redis]) -> None:
        if not redis_client:
            return
        deleted = await cache_service.delete_pattern(redis_client, f"schedule:{self.namespace}:*")
        logger.debug(f"Invalidadas {deleted} claves de {self.namespace}")

    async def get_all(
        self, db: Session, *, active_only: bool = True, redis_client: Optional[Redis] = None
    ) -> List[SchemaType]:
        """Listado ordenado por (sort_order, name), con caché si hay Redis."""
        cache_key = f"schedule:{self.namespace}:list:active:{active_only}"

        async def db_fetch():
            rows = self.repository.get_ordered(db, active_only=active_only)
            return [self.schema.model_validate(row) for row in rows]

        return await cache_service.get_or_set(
            redis_client=redis_client,
            cache_key=cache_key,
            db_fetch_func=db_fetch,
            model_class=self.schema,
            expiry_seconds=get_settings().CACHE_TTL_REFERENCE_DATA,
            is_list=True
        )

    def get(self, db: Session, obj_id: int) -> Any:
        obj = self.repository.get(db, obj_id)
        if not obj:
            raise NotFoundError(f"No existe {self.label} con id {obj_id}")
        return obj

    async def create(self, db: Session, obj_in: BaseModel, redis_client: Optional[Redis] = None) -> Any:
        obj = self.repository.create(db, obj_in=obj_in)
        logger.info(f"Alta de {self.label} {obj.id}: '{obj.name}'")
        await self._invalidate(redis_client)
        return obj

    async def update(
        self, db: Session, obj_id: int, obj_in: BaseModel, redis_client: Optional[Redis] = None
    ) -> Any:
        obj = self.get(db, obj_id)
        obj = self.repository.update(db, db_obj=obj, obj_in=obj_in)
        logger.info(f"Actualización de {self.label} {obj_id}")
        await self._invalidate(redis_client)
        return obj

    async def delete(self, db: Session, obj_id: int, redis_client: Optional[Redis] = None) -> Any:
        """Borrado lógico: las clases que la referencian se conservan."""
        obj = self.get(db, obj_id)
        obj = self.repository.soft_delete(db, db_obj=obj)
        logger.info(f"Baja lógica de {self.label} {obj_id}")
        await self._invalidate(redis_client)
        return obj


class DisciplineService(ReferenceDataService[DisciplineSchema]):
    async def create(
        self, db: Session, obj_in: DisciplineCreate, redis_client: Optional[Redis] = None
    ) -> Any:
        if discipline_repository.get_by_slug(db, slug=obj_in.slug):
            raise ScheduleValidationError(f"Ya existe una disciplina con slug '{obj_in.slug}'")
        return await super().create(db, obj_in, redis_client=redis_client)


room_service = ReferenceDataService(room_repository, RoomSchema, "rooms", "sala")
discipline_service = DisciplineService(discipline_repository, DisciplineSchema, "disciplines", "disciplina")
class_track_service = ReferenceDataService(class_track_repository, ClassTrackSchema, "tracks", "track")
