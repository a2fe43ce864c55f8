"""Community, role and membership endpoints."""

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from database import get_db
from schemas.auth import MessageResponse
from schemas.communities import (
    ChangeImageRequest,
    CommunityCheckName,
    CommunityCreate,
    CommunityDetail,
    CommunityMembersResponse,
    CommunitySummary,
    CreatedResponse,
    GiveRoleRequest,
    RoleResponse,
)
from services.auth import Principal, get_current_principal
from services.community_service import CommunityService


logger = logging.getLogger(__name__)

router = APIRouter(tags=["communities"])


@router.get("/communities", response_model=list[CommunitySummary])
def list_communities(
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    """Every community with its member count."""
    return CommunityService(db).list_communities()


@router.post("/communities/check-name", response_model=MessageResponse)
def check_community_name(
    payload: CommunityCheckName,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    service = CommunityService(db)
    if not service.name_available(payload.name, payload.ignore_community_id):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Community name already exists")
    return MessageResponse(message="Community name available")


@router.post("/communities/create", response_model=CreatedResponse)
def create_community(
    payload: CommunityCreate,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    """Create a community; the caller becomes its founder."""
    service = CommunityService(db)
    community = service.create_community(
        principal,
        name=payload.name,
        description=payload.description,
        picture=payload.picture,
    )
    return CreatedResponse(message="Community registered successfully", id=community.id)


@router.get("/communities/{community_id}", response_model=CommunityDetail)
def get_community(
    community_id: int,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    return CommunityService(db).get_detail(community_id)


@router.delete("/communities/{community_id}", response_model=MessageResponse)
def delete_community(
    community_id: int,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    """Delete a community and everything inside it. Founders and administrators only."""
    CommunityService(db).delete_community(principal, community_id)
    return MessageResponse(message="Community deleted successfully")


@router.put("/communities/{community_id}/change-image", response_model=MessageResponse)
def change_community_image(
    community_id: int,
    payload: ChangeImageRequest,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    CommunityService(db).change_image(principal, community_id, payload.picture)
    return MessageResponse(message="Community image updated successfully")


@router.post("/communities/{community_id}/give-role-to-user", response_model=MessageResponse)
def give_user_community_role(
    community_id: int,
    payload: GiveRoleRequest,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    """
    Set the role of ``user_id`` in the community, creating the membership if needed.

    Founders may grant any role, moderators may grant the member role, and a
    user without a membership may join as a member.
    """
    service = CommunityService(db)
    service.give_user_community_role(principal, community_id, payload.user_id, payload.role_name)
    return MessageResponse(message="Role assigned successfully")


@router.get("/communities/{community_id}/user/{user_id}/role", response_model=RoleResponse)
def get_user_role(
    community_id: int,
    user_id: int,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    return CommunityService(db).get_user_role(community_id, user_id)


@router.get("/communities/{community_id}/members", response_model=CommunityMembersResponse)
def get_members(
    community_id: int,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    return CommunityMembersResponse(data=CommunityService(db).get_members(community_id))


@router.delete("/communities/{community_id}/members/{user_id}", response_model=MessageResponse)
def remove_member(
    community_id: int,
    user_id: int,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    CommunityService(db).remove_member(principal, community_id, user_id)
    return MessageResponse(message="Member removed successfully")


@router.get("/roles", response_model=list[RoleResponse])
def list_roles(
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    return CommunityService(db).list_roles()
