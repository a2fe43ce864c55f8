from typing import Optional

from sqlalchemy import delete, insert, select

from models.plant import Plant, user_plant
from repositories.base import Repository
from repositories.content import paginate


class PlantRepository(Repository[Plant]):
    model = Plant

    def by_scientific_name(self, scientific_name: str) -> Optional[Plant]:
        return self.find_by(scientific_name=scientific_name)

    def listing(self, page: Optional[int] = None, limit: int = 10) -> tuple[list[Plant], int]:
        query = self.query().order_by(Plant.scientific_name)
        if page is None:
            rows = query.all()
            return rows, len(rows)
        return paginate(query, page, limit)

    def for_user(self, user_id: int, page: Optional[int] = None, limit: int = 10) -> tuple[list[Plant], int]:
        query = (
            self.query()
            .join(user_plant, user_plant.c.plant_id == Plant.id)
            .filter(user_plant.c.user_id == user_id)
            .order_by(Plant.scientific_name)
        )
        if page is None:
            rows = query.all()
            return rows, len(rows)
        return paginate(query, page, limit)


class UserPlantRepository:
    """Rows of the user_plant association table."""

    def __init__(self, db):
        self.db = db

    def exists(self, user_id: int, plant_id: int) -> bool:
        row = self.db.execute(
            select(user_plant.c.user_id).where(
                user_plant.c.user_id == user_id,
                user_plant.c.plant_id == plant_id,
            )
        ).first()
        return row is not None

    def add(self, user_id: int, plant_id: int) -> None:
        self.db.execute(insert(user_plant).values(user_id=user_id, plant_id=plant_id))

    def delete(self, user_id: int, plant_id: int) -> int:
        result = self.db.execute(
            delete(user_plant).where(
                user_plant.c.user_id == user_id,
                user_plant.c.plant_id == plant_id,
            )
        )
        return result.rowcount
