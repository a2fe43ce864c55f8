"""Community chat: WebSocket relay and REST history."""

import json
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, WebSocket, WebSocketDisconnect, status
from fastapi.concurrency import run_in_threadpool
from pydantic import ValidationError
from sqlalchemy.orm import Session

from database import get_db
from schemas.chat import ChatHistoryItem, ChatMessageIn
from services.auth import Principal, get_current_principal, principal_from_token
from services.chat_service import ChatService, hub
from services.exceptions import ServiceError, TokenError


logger = logging.getLogger(__name__)

router = APIRouter(tags=["chat"])

SEND_MESSAGE = "send_message"
RECEIVE_MESSAGE = "receive_message"
ERROR = "error"


async def _send_error(websocket: WebSocket, message: str) -> None:
    await websocket.send_json({"event": ERROR, "data": {"message": message}})


@router.websocket("/ws/chat/{community_id}")
async def chat_socket(
    websocket: WebSocket,
    community_id: int,
    token: Optional[str] = Query(None),
    db: Session = Depends(get_db),
):
    """
    Chat room of one community.

    Clients send ``{"event": "send_message", "data": {"text", "community_id",
    "user": {"id", ...}}}``. Each valid message is stored and relayed to every
    socket in the same room as ``receive_message`` with its ``id`` and
    ``createdAt``. Invalid frames get an ``error`` event back and the
    connection stays open.
    """
    try:
        principal = principal_from_token(token)
    except TokenError:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    await websocket.accept()
    await hub.join(community_id, websocket)
    service = ChatService(db)
    try:
        while True:
            raw = await websocket.receive_text()
            await _handle_frame(websocket, service, principal, community_id, raw)
    except WebSocketDisconnect:
        logger.debug("Chat peer of user %s left community %s", principal.user_id, community_id)
    finally:
        await hub.leave(community_id, websocket)


async def _handle_frame(
    websocket: WebSocket,
    service: ChatService,
    principal: Principal,
    community_id: int,
    raw: str,
) -> None:
    try:
        frame = json.loads(raw)
    except ValueError:
        await _send_error(websocket, "Malformed JSON")
        return

    if not isinstance(frame, dict) or frame.get("event") != SEND_MESSAGE:
        await _send_error(websocket, "Unknown event")
        return

    try:
        payload = ChatMessageIn.model_validate(frame.get("data"))
    except ValidationError:
        await _send_error(websocket, "Message must include text, community_id and user")
        return

    if payload.community_id != community_id:
        await _send_error(websocket, "Message community does not match this room")
        return

    try:
        message = await run_in_threadpool(
            service.persist_message, principal.user_id, community_id, payload.text
        )
    except ServiceError as e:
        await _send_error(websocket, e.message)
        return
    except Exception:
        logger.exception("Failed to store chat message for community %s", community_id)
        await run_in_threadpool(service.db.rollback)
        await _send_error(websocket, "Message could not be saved")
        return

    data = payload.model_dump()
    data["user"]["id"] = principal.user_id
    data["id"] = message.id
    data["createdAt"] = message.created_at.isoformat()
    await hub.broadcast(community_id, {"event": RECEIVE_MESSAGE, "data": data})


@router.get("/chat/history/{community_id}", response_model=list[ChatHistoryItem])
def get_chat_history(
    community_id: int,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    """Stored messages of the community, oldest first."""
    return ChatService(db).history(community_id)
