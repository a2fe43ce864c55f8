"""Schemas for image upload endpoints."""

from pydantic import BaseModel, ConfigDict, Field


class ImageUploadResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    image_url: str = Field(alias="imageUrl")


class RandomFilepathRequest(BaseModel):
    type: str = Field(min_length=1, max_length=64)


class RandomFilepathResponse(BaseModel):
    filepath: str
