from dataclasses import dataclass
from typing import Any, Dict, Generic, List, Optional, Type, TypeVar, Union
import math

from pydantic import BaseModel
from sqlalchemy.orm import Query, Session

from datravel.db.database import Base

ModelType = TypeVar("ModelType", bound=Base)
CreateSchemaType = TypeVar("CreateSchemaType", bound=BaseModel)
UpdateSchemaType = TypeVar("UpdateSchemaType", bound=BaseModel)


class CRUDBase(Generic[ModelType, CreateSchemaType, UpdateSchemaType]):
    def __init__(self, model: Type[ModelType]):
        self.model = model

    def get(self, db: Session, id: Any) -> Optional[ModelType]:
        return db.query(self.model).filter(self.model.id == id).first()

    def create(self, db: Session, *, obj_in: Union[CreateSchemaType, Dict[str, Any]], **extra) -> ModelType:
        data = obj_in if isinstance(obj_in, dict) else obj_in.model_dump()
        db_obj = self.model(**data, **extra)
        db.add(db_obj)
        db.commit()
        db.refresh(db_obj)
        return db_obj

    def update(
        self, db: Session, *, db_obj: ModelType, obj_in: Union[UpdateSchemaType, Dict[str, Any]]
    ) -> ModelType:
        data = obj_in if isinstance(obj_in, dict) else obj_in.model_dump(exclude_unset=True)
        for field, value in data.items():
            setattr(db_obj, field, value)
        db.add(db_obj)
        db.commit()
        db.refresh(db_obj)
        return db_obj

    def remove(self, db: Session, *, db_obj: ModelType) -> None:
        db.delete(db_obj)
        db.commit()


@dataclass
class Page:
    """One page of a query plus the pagination block returned to clients."""
    items: List[Any]
    current_page: int
    per_page: int
    total: int

    @property
    def last_page(self) -> int:
        return max(1, math.ceil(self.total / self.per_page))

    @property
    def pagination(self) -> Dict[str, int]:
        first = (self.current_page - 1) * self.per_page + 1 if self.items else 0
        return {
            "current_page": self.current_page,
            "last_page": self.last_page,
            "total": self.total,
            "from": first,
            "to": first + len(self.items) - 1 if self.items else 0,
            "per_page": self.per_page,
        }


def paginate(query: Query, page: int = 1, per_page: int = 10) -> Page:
    if per_page <= 0:
        per_page = 10
    if page <= 0:
        page = 1
    total = query.enable_eagerloads(False).order_by(None).count()
    items = query.offset((page - 1) * per_page).limit(per_page).all()
    return Page(items=items, current_page=page, per_page=per_page, total=total)
