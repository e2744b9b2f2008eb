"""Message lifecycle and authorization.

Every operation first passes the membership gate. After that the rules
differ: only the sender may edit a message, while the sender or the class
instructor may delete it.
"""

import logging
from datetime import datetime
from typing import List, Optional

import pytz

from config import DEFAULT_CHANNEL, MESSAGE_MAX_LENGTH, MESSAGE_PAGE_SIZE
from core.exceptions import MessageNotFoundError, NotAuthorizedError, ValidationError
from core.store import DocumentStore
from models.message import MessageModel
from schemas.class_schema import ClassRecord, MessageRecord
from utils.class_manager import ClassManager
from utils.converters import message_record_to_model, model_to_message_record
from utils.ids import new_id
from utils.membership_gate import is_instructor, require_member

logger = logging.getLogger(__name__)


def _clean_content(content: Optional[str]) -> str:
    content = (content or "").strip()
    if not content:
        raise ValidationError("Message content is required")
    if len(content) > MESSAGE_MAX_LENGTH:
        raise ValidationError(
            f"Message cannot be more than {MESSAGE_MAX_LENGTH} characters"
        )
    return content


class MessageManager:
    """Manages messages posted to class channels."""

    def __init__(self, store: DocumentStore):
        self.store = store
        self.classes = ClassManager(store)

    def _load_for_member(self, class_id: str, user_id: str) -> ClassRecord:
        record = self.classes.get_class(class_id)
        require_member(record, user_id)
        return record

    def _get_message(self, class_id: str, message_id: str) -> MessageRecord:
        model = self.store.find_one(
            MessageModel,
            MessageModel.message_id == message_id,
            MessageModel.class_id == class_id,
        )
        if not model:
            raise MessageNotFoundError(message_id)
        return model_to_message_record(model)

    def list_messages(
        self, class_id: str, requester_id: str, channel: str = DEFAULT_CHANNEL
    ) -> List[MessageRecord]:
        """List the latest messages of a channel, oldest first."""
        self._load_for_member(class_id, requester_id)
        models = self.store.find_by_filter(
            MessageModel,
            MessageModel.class_id == class_id,
            MessageModel.channel == channel,
            order_by=[MessageModel.id.desc()],
            limit=MESSAGE_PAGE_SIZE,
        )
        return [model_to_message_record(m) for m in reversed(models)]

    def post_message(
        self,
        class_id: str,
        sender_id: str,
        content: str,
        channel: str = DEFAULT_CHANNEL,
        assignment_id: Optional[str] = None,
    ) -> MessageRecord:
        """Post a message to a channel.

        Raises:
            ClassNotFoundError: If class not found.
            NotAuthorizedError: If the sender is not part of the class.
            ValidationError: If the content is blank or too long, or the
                channel does not exist in the class.
        """
        content = _clean_content(content)
        record = self._load_for_member(class_id, sender_id)
        channel = channel or DEFAULT_CHANNEL
        if channel not in record.channel_list:
            raise ValidationError(f"Channel '{channel}' does not exist in this class")

        now = datetime.now(pytz.utc).isoformat()
        message = MessageRecord(
            message_id=new_id(),
            class_id=class_id,
            sender_id=sender_id,
            content=content,
            channel=channel,
            assignment_id=assignment_id,
            created_at=now,
            updated_at=now,
        )
        self.store.insert(message_record_to_model(message))
        return message

    def edit_message(
        self, class_id: str, message_id: str, requester_id: str, new_content: str
    ) -> MessageRecord:
        """Replace a message's content. Only the original sender may edit.

        Raises:
            ClassNotFoundError: If class not found.
            NotAuthorizedError: If the requester is not part of the class or
                is not the sender (the instructor included).
            MessageNotFoundError: If the message does not exist in the class.
            ValidationError: If the new content is blank or too long.
        """
        self._load_for_member(class_id, requester_id)
        message = self._get_message(class_id, message_id)
        if message.sender_id != requester_id:
            raise NotAuthorizedError("Not authorized to edit this message")
        content = _clean_content(new_content)

        updated_at = datetime.now(pytz.utc).isoformat()
        updated = self.store.update_fields(
            MessageModel,
            MessageModel.message_id,
            message_id,
            {"content": content, "updated_at": updated_at},
        )
        if not updated:
            # Deleted after it was read
            raise MessageNotFoundError(message_id)
        return message.model_copy(update={"content": content, "updated_at": updated_at})

    def delete_message(self, class_id: str, message_id: str, requester_id: str) -> None:
        """Delete a message. The sender or the class instructor may delete.

        Raises:
            ClassNotFoundError: If class not found.
            NotAuthorizedError: If the requester is not part of the class, or
                is neither the sender nor the instructor.
            MessageNotFoundError: If the message does not exist in the class.
        """
        record = self._load_for_member(class_id, requester_id)
        message = self._get_message(class_id, message_id)
        if message.sender_id != requester_id and not is_instructor(record, requester_id):
            raise NotAuthorizedError("Not authorized to delete this message")

        self.store.delete_by_filter(MessageModel, MessageModel.message_id == message_id)
        logger.info(
            "Deleted message %s in class %s (by %s)", message_id, class_id, requester_id
        )
