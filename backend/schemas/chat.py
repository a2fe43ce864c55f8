"""Schemas for chat frames and history."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class ChatUser(BaseModel):
    """Sender info echoed back to peers; extra display fields pass through."""

    model_config = ConfigDict(extra="allow")

    id: int


class ChatMessageIn(BaseModel):
    model_config = ConfigDict(extra="allow")

    text: str = Field(min_length=1, max_length=2000)
    community_id: int
    user: ChatUser


class ChatAuthor(BaseModel):
    id: int
    username: str
    picture: Optional[str] = None
    role: Optional[str] = None


class ChatHistoryItem(BaseModel):
    id: int
    text: str
    community_id: int
    created_at: datetime
    user: Optional[ChatAuthor] = None
