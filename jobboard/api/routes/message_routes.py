"""
Messaging Routes

POST /messages/conversations                            - Start (or reuse) a conversation
GET  /messages/conversations                            - Own conversations, latest activity first
GET  /messages/conversations/{conversation_id}/messages - Messages, oldest first
POST /messages/conversations/{conversation_id}/messages - Send a message
POST /messages/conversations/{conversation_id}/read     - Mark the other side's messages read

WS   /messages/ws/conversations?token=...                   - Live conversation list
WS   /messages/ws/conversations/{conversation_id}?token=... - Live message list
"""

from fastapi import APIRouter, HTTPException, Depends, WebSocket
from typing import List

from jobboard.api.websocket import authenticate_websocket, reject_websocket, stream_snapshots
from jobboard.core.auth import get_current_user
from jobboard.core.exceptions import AppError
from jobboard.services.auth_service import get_auth_service
from jobboard.services.message_service import get_message_service
from jobboard.schemas.schemas import (
    ConversationCreate, ConversationResponse, MessageCreate, ChatMessageResponse,
    CreatedResponse, MessageResponse
)

router = APIRouter(prefix="/messages", tags=["Messages"])


@router.post("/conversations", response_model=CreatedResponse, status_code=201)
async def create_conversation(request: ConversationCreate, user: dict = Depends(get_current_user)):
    """
    Start a conversation between an employer and a job seeker.

    Either side may start it. Calling again for the same pair returns the
    existing conversation.
    """
    other = get_auth_service().get_account(request.other_user_id)
    if not other:
        raise HTTPException(status_code=404, detail="User not found")
    if other["role"] == user["role"]:
        raise HTTPException(status_code=400, detail="Conversations are between an employer and a job seeker")

    if user["role"] == "employer":
        employer_id, job_seeker_id = user["user_id"], other["user_id"]
    else:
        employer_id, job_seeker_id = other["user_id"], user["user_id"]

    conversation_id = get_message_service().create_conversation(employer_id, job_seeker_id, request.job_id)
    return CreatedResponse(id=conversation_id, message="Conversation ready")


@router.get("/conversations", response_model=List[ConversationResponse])
async def list_conversations(user: dict = Depends(get_current_user)):
    conversations = get_message_service().get_conversations(user["user_id"])
    return [ConversationResponse(**c) for c in conversations]


@router.get("/conversations/{conversation_id}/messages", response_model=List[ChatMessageResponse])
async def list_messages(conversation_id: str, user: dict = Depends(get_current_user)):
    service = get_message_service()
    service.get_participant_conversation(conversation_id, user["user_id"])
    return [ChatMessageResponse(**m) for m in service.get_messages(conversation_id)]


@router.post("/conversations/{conversation_id}/messages", response_model=CreatedResponse, status_code=201)
async def send_message(conversation_id: str, request: MessageCreate, user: dict = Depends(get_current_user)):
    message_id = get_message_service().send_message(conversation_id, user["user_id"], request.text)
    return CreatedResponse(id=message_id, message="Message sent")


@router.post("/conversations/{conversation_id}/read", response_model=MessageResponse)
async def mark_read(conversation_id: str, user: dict = Depends(get_current_user)):
    updated = get_message_service().mark_as_read(conversation_id, user["user_id"])
    return MessageResponse(message=f"Marked {updated} messages as read")


@router.websocket("/ws/conversations")
async def conversations_socket(websocket: WebSocket):
    user = await authenticate_websocket(websocket)
    if not user:
        return
    service = get_message_service()
    await stream_snapshots(
        websocket, "conversations",
        lambda deliver: service.listen_to_conversations(user["user_id"], deliver)
    )


@router.websocket("/ws/conversations/{conversation_id}")
async def messages_socket(websocket: WebSocket, conversation_id: str):
    user = await authenticate_websocket(websocket)
    if not user:
        return
    service = get_message_service()
    try:
        service.get_participant_conversation(conversation_id, user["user_id"])
    except AppError as e:
        await reject_websocket(websocket, e.detail)
        return
    await stream_snapshots(
        websocket, "messages",
        lambda deliver: service.listen_to_messages(conversation_id, deliver)
    )
