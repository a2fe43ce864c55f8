"""Image upload endpoints."""

from typing import Optional

from fastapi import APIRouter, Depends, File, UploadFile

from schemas.images import ImageUploadResponse, RandomFilepathRequest, RandomFilepathResponse
from services.auth import Principal, get_current_principal
from services.exceptions import BadRequestError
from services.image_service import ImageService


router = APIRouter(prefix="/image", tags=["images"])


@router.post("/upload/{folder:path}", response_model=ImageUploadResponse)
def upload_image(
    folder: str,
    image: Optional[UploadFile] = File(None),
    principal: Principal = Depends(get_current_principal),
):
    """
    Store the multipart ``image`` field under ``folder``.

    The stored file gets a random name; the response carries its public URL
    under ``/uploads``.
    """
    if image is None or not image.filename:
        raise BadRequestError("No image uploaded")
    try:
        url = ImageService().save(folder, image.filename, image.file)
    finally:
        image.file.close()
    return ImageUploadResponse(image_url=url)


@router.post("/random-filepath", response_model=RandomFilepathResponse)
def random_filepath(payload: RandomFilepathRequest):
    """Pick one of the bundled default images of the given type."""
    return RandomFilepathResponse(filepath=ImageService().random_default_filepath(payload.type))
