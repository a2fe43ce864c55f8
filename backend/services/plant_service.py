"""Plant catalog and the user/plant association."""

import logging
import math
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from models.plant import Plant
from repositories import PlantRepository, UserPlantRepository
from services.auth import Principal
from services.exceptions import ConflictError, NotFoundError


logger = logging.getLogger(__name__)

PLANT_EXISTS_MESSAGE = "A plant with the given scientific name already exists"
PLANT_CREATED_MESSAGE = "Plant registered successfully"


class PlantService:
    """Service for plant catalog operations."""

    def __init__(self, db: Session):
        self.db = db
        self.plants = PlantRepository(db)
        self.user_plants = UserPlantRepository(db)

    def create(
        self,
        scientific_name: str,
        family: str,
        images: list[str],
        common_names: Optional[list[str]] = None,
    ) -> Plant:
        if self.plants.by_scientific_name(scientific_name):
            raise ConflictError(PLANT_EXISTS_MESSAGE)

        try:
            plant = self.plants.add(
                scientific_name=scientific_name,
                family=family,
                images=list(images),
                common_names=list(common_names or []),
            )
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise ConflictError(PLANT_EXISTS_MESSAGE)
        return plant

    def first_or_create(
        self,
        scientific_name: str,
        family: str,
        images: list[str],
        common_names: Optional[list[str]] = None,
    ) -> tuple[Plant, bool]:
        """Return the plant with this scientific name, creating it if needed.

        The second element tells whether the plant was created by this call.
        """
        existing = self.plants.by_scientific_name(scientific_name)
        if existing:
            return existing, False
        try:
            return self.create(scientific_name, family, images, common_names), True
        except ConflictError:
            # Someone registered it between our lookup and insert.
            return self.plants.by_scientific_name(scientific_name), False

    def get_plant(self, plant_id: int) -> Plant:
        plant = self.plants.get(plant_id)
        if not plant:
            raise NotFoundError("Plant not found")
        return plant

    def get_plant_id_by_name(self, scientific_name: str) -> int:
        plant = self.plants.by_scientific_name(scientific_name)
        if not plant:
            raise NotFoundError("Plant not found")
        return plant.id

    def list_plants(self, page: Optional[int] = None, limit: int = 10) -> tuple[list[Plant], Optional[int]]:
        plants, total = self.plants.listing(page, limit)
        return plants, self._pages(page, total, limit)

    def associate(self, principal: Principal, plant_id: int) -> bool:
        """Link the plant to the caller. Returns False when the link already existed."""
        self.get_plant(plant_id)
        if self.user_plants.exists(principal.user_id, plant_id):
            return False

        try:
            self.user_plants.add(principal.user_id, plant_id)
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            return False
        logger.info("User %s associated plant %s", principal.user_id, plant_id)
        return True

    def dissociate(self, principal: Principal, plant_id: int) -> None:
        removed = self.user_plants.delete(principal.user_id, plant_id)
        if not removed:
            self.db.rollback()
            raise NotFoundError("Association not found or already removed")
        self.db.commit()

    def is_associated(self, principal: Principal, plant_id: int) -> bool:
        return self.user_plants.exists(principal.user_id, plant_id)

    def get_user_plants(
        self,
        user_id: int,
        page: Optional[int] = None,
        limit: int = 10,
    ) -> tuple[list[Plant], Optional[int]]:
        plants, total = self.plants.for_user(user_id, page, limit)
        return plants, self._pages(page, total, limit)

    @staticmethod
    def _pages(page: Optional[int], total: int, limit: int) -> Optional[int]:
        if page is None:
            return None
        return math.ceil(total / limit)
