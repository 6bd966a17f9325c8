from typing import Any, Dict, Generic, List, Optional, Type, TypeVar, Union

from pydantic import BaseModel
from sqlalchemy.orm import Session

from app.db.base_class import Base

ModelType = TypeVar("ModelType", bound=Base)
CreateSchemaType = TypeVar("CreateSchemaType", bound=BaseModel)
UpdateSchemaType = TypeVar("UpdateSchemaType", bound=BaseModel)


class BaseRepository(Generic[ModelType, CreateSchemaType, UpdateSchemaType]):
    def __init__(self, model: Type[ModelType]):
        """
        Repository con operaciones CRUD por defecto.
        """
        self.model = model

    def get(self, db: Session, id: Any) -> Optional[ModelType]:
        """
        Obtener un objeto por su ID.

        Args:
            db: Sesión de base de datos
            id: ID del objeto a obtener

        Returns:
            El objeto solicitado o None si no existe
        """
        return db.get(self.model, id)

    def create(self, db: Session, *, obj_in: Union[CreateSchemaType, Dict[str, Any]]) -> ModelType:
        """
        Crear un nuevo registro.

        Args:
            db: Sesión de base de datos
            obj_in: Datos del objeto a crear (schema o diccionario)

        Returns:
            El objeto creado
        """
        # model_dump conserva date/time como objetos Python
        obj_in_data = obj_in if isinstance(obj_in, dict) else obj_in.model_dump()

        db_obj = self.model(**obj_in_data)
        db.add(db_obj)
        db.commit()
        db.refresh(db_obj)
        return db_obj

    def update(
        self,
        db: Session,
        *,
        db_obj: ModelType,
        obj_in: Union[UpdateSchemaType, Dict[str, Any]]
    ) -> ModelType:
        """
        Actualizar un registro. Solo se tocan los campos presentes en obj_in.

        Args:
            db: Sesión de base de datos
            db_obj: Objeto existente a actualizar
            obj_in: Datos de actualización

        Returns:
            El objeto actualizado
        """
        if isinstance(obj_in, dict):
            update_data = obj_in
        else:
            update_data = obj_in.model_dump(exclude_unset=True)
        for field, value in update_data.items():
            if hasattr(db_obj, field):
                setattr(db_obj, field, value)
        db.add(db_obj)
        db.commit()
        db.refresh(db_obj)
        return db_obj

    def exists(self, db: Session, id: int) -> bool:
        """
        Verificar si un objeto existe.

        Args:
            db: Sesión de base de datos
            id: ID del objeto a verificar

        Returns:
            True si el objeto existe, False en caso contrario
        """
        query = db.query(self.model.id).filter(self.model.id == id)
        return db.query(query.exists()).scalar()


class SoftDeleteRepository(BaseRepository[ModelType, CreateSchemaType, UpdateSchemaType]):
    """
    Repository para tablas de referencia con columna is_active.

    Las listas se ordenan por (sort_order, name) y el borrado solo desactiva la fila.
    """

    def get_ordered(self, db: Session, *, active_only: bool = True) -> List[ModelType]:
        query = db.query(self.model)
        if active_only:
            query = query.filter(self.model.is_active.is_(True))
        return query.order_by(self.model.sort_order, self.model.name, self.model.id).all()

    def get_active(self, db: Session, id: Any) -> Optional[ModelType]:
        return (
            db.query(self.model)
            .filter(self.model.id == id, self.model.is_active.is_(True))
            .first()
        )

    def soft_delete(self, db: Session, *, db_obj: ModelType) -> ModelType:
        db_obj.is_active = False
        db.add(db_obj)
        db.commit()
        db.refresh(db_obj)
        return db_obj
