"""Community chat: message persistence and per-community fan-out."""

import asyncio
import logging
from collections import defaultdict
from typing import Any

from fastapi import WebSocket
from sqlalchemy.orm import Session

from models.message import Message
from repositories import CommunityRepository, MembershipRepository, MessageRepository
from services.exceptions import NotFoundError


logger = logging.getLogger(__name__)


class ChatHub:
    """Open chat sockets grouped by community id."""

    def __init__(self):
        self._rooms: dict[int, set[WebSocket]] = defaultdict(set)
        self._lock = asyncio.Lock()

    async def join(self, community_id: int, websocket: WebSocket) -> None:
        async with self._lock:
            self._rooms[community_id].add(websocket)

    async def leave(self, community_id: int, websocket: WebSocket) -> None:
        async with self._lock:
            room = self._rooms.get(community_id)
            if room is None:
                return
            room.discard(websocket)
            if not room:
                del self._rooms[community_id]

    def peers(self, community_id: int) -> set[WebSocket]:
        return set(self._rooms.get(community_id, ()))

    async def broadcast(self, community_id: int, frame: dict[str, Any]) -> int:
        """Send ``frame`` to every socket in the room concurrently.

        Sockets whose send fails are removed from the room. Returns the number
        of successful deliveries.
        """
        peers = list(self.peers(community_id))
        if not peers:
            return 0

        results = await asyncio.gather(
            *(peer.send_json(frame) for peer in peers),
            return_exceptions=True,
        )
        delivered = 0
        for peer, result in zip(peers, results):
            if isinstance(result, Exception):
                logger.warning("Dropping chat peer in community %s: %s", community_id, result)
                await self.leave(community_id, peer)
            else:
                delivered += 1
        return delivered


hub = ChatHub()


class ChatService:
    """Service for chat history and message storage."""

    def __init__(self, db: Session):
        self.db = db
        self.messages = MessageRepository(db)
        self.communities = CommunityRepository(db)
        self.memberships = MembershipRepository(db)

    def persist_message(self, user_id: int, community_id: int, text: str) -> Message:
        if not self.communities.get(community_id):
            raise NotFoundError(f"Community not found (id:{community_id})")

        message = self.messages.add(text=text, user_id=user_id, community_id=community_id)
        self.db.commit()
        self.db.refresh(message)
        return message

    def history(self, community_id: int) -> list[dict]:
        """Messages of the community, oldest first, with author and community role."""
        if not self.communities.get(community_id):
            raise NotFoundError(f"Community not found (id:{community_id})")

        messages = self.messages.history(community_id)
        roles = self.memberships.role_names_for(community_id, list({m.user_id for m in messages}))
        return [
            {
                "id": message.id,
                "text": message.text,
                "community_id": message.community_id,
                "created_at": message.created_at,
                "user": {
                    "id": message.user.id,
                    "username": message.user.username,
                    "picture": message.user.picture,
                    "role": roles.get(message.user.id),
                } if message.user else None,
            }
            for message in messages
        ]
