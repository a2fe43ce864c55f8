"""Pydantic schemas for communities, roles and memberships."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class CommunityCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    description: str = Field(min_length=1)
    picture: str = Field(min_length=1)


class CommunityCheckName(BaseModel):
    name: str = Field(min_length=1)
    ignore_community_id: Optional[int] = None


class CommunitySummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    description: Optional[str] = None
    picture: Optional[str] = None
    user_count: int = 0


class CommunityDetail(CommunitySummary):
    created_at: datetime
    updated_at: datetime


class CreatedResponse(BaseModel):
    message: str
    id: int


class ChangeImageRequest(BaseModel):
    picture: str = Field(min_length=1)


class GiveRoleRequest(BaseModel):
    user_id: int
    role_name: str = Field(min_length=1)


class RoleResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    display_name: Optional[str] = None


class CommunityMember(BaseModel):
    id: int
    username: str
    picture: Optional[str] = None
    role: Optional[str] = None
    role_display_name: Optional[str] = None
    status: str


class CommunityMembersResponse(BaseModel):
    data: list[CommunityMember]
