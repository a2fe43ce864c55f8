"""Pydantic schemas for the plant catalog."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class PlantCreate(BaseModel):
    scientific_name: str = Field(min_length=1, max_length=255)
    family: str = Field(min_length=1, max_length=255)
    images: list[str]
    common_names: Optional[list[str]] = None


class PlantResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    scientific_name: str
    family: str
    images: list[str]
    common_names: list[str]


class PlantCreatedResponse(BaseModel):
    message: str
    id: int
    created: bool


class PlantPage(BaseModel):
    plants: list[PlantResponse]
    total_pages: Optional[int] = None  # Only set for paginated requests


class AssociateRequest(BaseModel):
    plant_id: int


class AssociationResponse(BaseModel):
    message: str
    user_id: int
    plant_id: int


class IsAssociatedResponse(BaseModel):
    associated: bool


class IdentifyRequest(BaseModel):
    photo_url: str = Field(min_length=1)
    lang: str = Field(min_length=2, max_length=8)
