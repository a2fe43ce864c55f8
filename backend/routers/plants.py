"""Plant catalog, user collection and identification endpoints."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from database import get_db
from schemas.auth import MessageResponse
from schemas.plants import (
    AssociateRequest,
    AssociationResponse,
    IdentifyRequest,
    IsAssociatedResponse,
    PlantCreate,
    PlantCreatedResponse,
    PlantPage,
    PlantResponse,
)
from services.auth import Principal, get_current_principal
from services.plant_identification import PlantIdentifier
from services.plant_service import PLANT_CREATED_MESSAGE, PLANT_EXISTS_MESSAGE, PlantService


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/plant", tags=["plants"])


@router.get("", response_model=PlantPage)
def list_plants(
    page: Optional[int] = Query(None, ge=1),
    limit: int = Query(10, ge=1, le=100),
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    plants, total_pages = PlantService(db).list_plants(page, limit)
    return PlantPage(plants=[PlantResponse.model_validate(p) for p in plants], total_pages=total_pages)


@router.post("/create", response_model=PlantCreatedResponse)
def create_plant(
    payload: PlantCreate,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    plant = PlantService(db).create(
        payload.scientific_name,
        payload.family,
        payload.images,
        payload.common_names,
    )
    return PlantCreatedResponse(message=PLANT_CREATED_MESSAGE, id=plant.id, created=True)


@router.post("/firstOrCreate", response_model=PlantCreatedResponse)
def first_or_create(
    payload: PlantCreate,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    """Return the existing plant id or register the plant. 200 either way; ``created`` tells which."""
    plant, created = PlantService(db).first_or_create(
        payload.scientific_name,
        payload.family,
        payload.images,
        payload.common_names,
    )
    message = PLANT_CREATED_MESSAGE if created else PLANT_EXISTS_MESSAGE
    return PlantCreatedResponse(message=message, id=plant.id, created=created)


@router.post("/associate", response_model=AssociationResponse)
def associate(
    payload: AssociateRequest,
    response: Response,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    """Add a plant to the caller's collection. 201 when new, 200 when it was already there."""
    created = PlantService(db).associate(principal, payload.plant_id)
    if created:
        response.status_code = status.HTTP_201_CREATED
        message = "Plant associated successfully"
    else:
        message = "The association already existed"
    return AssociationResponse(message=message, user_id=principal.user_id, plant_id=payload.plant_id)


@router.delete("/disassociate/{plant_id}", response_model=MessageResponse)
def dissociate(
    plant_id: int,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    PlantService(db).dissociate(principal, plant_id)
    return MessageResponse(message="Plant dissociated successfully from user")


@router.get("/{plant_id}/isAssociated", response_model=IsAssociatedResponse)
def is_associated(
    plant_id: int,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    return IsAssociatedResponse(associated=PlantService(db).is_associated(principal, plant_id))


@router.get("/name/{scientific_name}")
def get_plant_id_by_name(
    scientific_name: str,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    return {"id": PlantService(db).get_plant_id_by_name(scientific_name)}


@router.get("/getUserPlants/{user_id}", response_model=PlantPage, response_model_exclude_none=True)
def get_user_plants(
    user_id: int,
    page: Optional[int] = Query(None, ge=1),
    limit: int = Query(10, ge=1, le=100),
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    """Plants in a user's collection. Paginated only when ``page`` is given."""
    plants, total_pages = PlantService(db).get_user_plants(user_id, page, limit)
    return PlantPage(plants=[PlantResponse.model_validate(p) for p in plants], total_pages=total_pages)


@router.post("/identify")
def identify_plant(
    payload: IdentifyRequest,
    principal: Principal = Depends(get_current_principal),
):
    """Proxy a photo URL to Pl@ntNet and return its identification result as-is."""
    return PlantIdentifier().identify(payload.photo_url, payload.lang)


@router.get("/{plant_id}", response_model=PlantResponse)
def get_plant(
    plant_id: int,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    return PlantService(db).get_plant(plant_id)
