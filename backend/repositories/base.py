"""Generic SQLAlchemy repository used by the per-entity repositories."""

from typing import Any, Generic, Optional, Type, TypeVar

from sqlalchemy.orm import Session

from database import Base


ModelT = TypeVar("ModelT", bound=Base)


class Repository(Generic[ModelT]):
    """Basic persistence operations for one mapped model.

    Writes are flushed, not committed; the calling service owns the
    transaction boundary.
    """

    model: Type[ModelT]

    def __init__(self, db: Session):
        self.db = db

    def query(self):
        return self.db.query(self.model)

    def get(self, entity_id: Any) -> Optional[ModelT]:
        return self.db.get(self.model, entity_id)

    def find_by(self, **filters) -> Optional[ModelT]:
        return self.query().filter_by(**filters).first()

    def exists(self, exclude_id: Optional[int] = None, **filters) -> bool:
        query = self.query().filter_by(**filters)
        if exclude_id is not None:
            query = query.filter(self.model.id != exclude_id)
        return query.first() is not None

    def count(self, **filters) -> int:
        return self.query().filter_by(**filters).count()

    def add(self, **values) -> ModelT:
        entity = self.model(**values)
        self.db.add(entity)
        self.db.flush()
        return entity

    def update(self, entity: ModelT, **values) -> ModelT:
        for field, value in values.items():
            setattr(entity, field, value)
        self.db.flush()
        return entity

    def delete(self, entity: ModelT) -> None:
        self.db.delete(entity)
        self.db.flush()
