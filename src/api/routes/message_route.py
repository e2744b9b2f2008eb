"""Message routes."""

from fastapi import APIRouter, Query

from config import DEFAULT_CHANNEL
from core.dependencies import CurrentIdentityDep, MessageManagerDep
from schemas.class_schema import (
    AckResponse,
    EditedMessageInfo,
    EditedMessageResponse,
    EditMessageRequest,
    MessageInfo,
    MessageListResponse,
    MessageRecord,
    MessageResponse,
    PostMessageRequest,
)
from utils.ids import ensure_valid_id

router = APIRouter(prefix="/api/classes/{class_id}/messages", tags=["Message"])


def build_message_info(message: MessageRecord) -> MessageInfo:
    return MessageInfo(
        id=message.message_id,
        class_id=message.class_id,
        sender_id=message.sender_id,
        content=message.content,
        channel=message.channel,
        assignment_id=message.assignment_id,
        created_at=message.created_at,
        updated_at=message.updated_at,
    )


@router.get("", response_model=MessageListResponse, summary="List channel messages")
def list_messages(
    class_id: str,
    messages: MessageManagerDep,
    identity: CurrentIdentityDep,
    channel: str = Query(default=DEFAULT_CHANNEL),
) -> MessageListResponse:
    ensure_valid_id(class_id, "class ID")
    records = messages.list_messages(class_id, identity.user_id, channel)
    return MessageListResponse(messages=[build_message_info(m) for m in records])


@router.post("", response_model=MessageResponse, summary="Post a message")
def post_message(
    class_id: str,
    req: PostMessageRequest,
    messages: MessageManagerDep,
    identity: CurrentIdentityDep,
) -> MessageResponse:
    ensure_valid_id(class_id, "class ID")
    record = messages.post_message(
        class_id,
        identity.user_id,
        req.content,
        channel=req.channel,
        assignment_id=req.assignment_id,
    )
    return MessageResponse(message=build_message_info(record))


@router.put("/{message_id}", response_model=EditedMessageResponse, summary="Edit a message")
def edit_message(
    class_id: str,
    message_id: str,
    req: EditMessageRequest,
    messages: MessageManagerDep,
    identity: CurrentIdentityDep,
) -> EditedMessageResponse:
    """Edit a message. Only its sender may edit it."""
    ensure_valid_id(class_id, "class ID")
    ensure_valid_id(message_id, "message ID")
    record = messages.edit_message(class_id, message_id, identity.user_id, req.content)
    info = EditedMessageInfo(
        id=record.message_id, content=record.content, updated_at=record.updated_at
    )
    return EditedMessageResponse(message=info)


@router.delete("/{message_id}", response_model=AckResponse, summary="Delete a message")
def delete_message(
    class_id: str,
    message_id: str,
    messages: MessageManagerDep,
    identity: CurrentIdentityDep,
) -> AckResponse:
    """Delete a message. Its sender or the class instructor may delete it."""
    ensure_valid_id(class_id, "class ID")
    ensure_valid_id(message_id, "message ID")
    messages.delete_message(class_id, message_id, identity.user_id)
    return AckResponse(message="Message deleted successfully")
