"""Channel registry.

Each class keeps an ordered list of channel names. Classes that never
created a channel use ``DEFAULT_CHANNELS``.
"""

import logging
import re
from datetime import datetime
from typing import List

import pytz

from config import DEFAULT_CHANNELS
from core.exceptions import (
    AlreadyExistsError,
    ChannelNotFoundError,
    InvalidOperationError,
    ValidationError,
)
from core.store import DocumentStore
from models.class_model import ClassModel
from models.message import MessageModel
from utils.class_manager import ClassManager
from utils.membership_gate import require_instructor, require_member

logger = logging.getLogger(__name__)

_INVALID_CHANNEL_CHARS = re.compile(r"[^a-z0-9-]")


def normalize_channel_name(raw_name: str) -> str:
    """Normalize a channel name.

    Trims, lower-cases, and replaces every character outside ``[a-z0-9-]``
    with ``-``. Applying it twice gives the same result as applying it once.

    >>> normalize_channel_name("Hw #1!")
    'hw--1-'
    """
    return _INVALID_CHANNEL_CHARS.sub("-", raw_name.strip().lower())


class ChannelRegistry:
    """Manages the channel list of a class."""

    def __init__(self, store: DocumentStore):
        self.store = store
        self.classes = ClassManager(store)

    def _write_channels(self, record, channels: List[str]) -> None:
        self.store.update_fields(
            ClassModel,
            ClassModel.class_id,
            record.class_id,
            {"channels": channels, "updated_at": datetime.now(pytz.utc).isoformat()},
            expected_version=record.version,
        )

    def list_channels(self, class_id: str, requester_id: str) -> List[str]:
        record = self.classes.get_class(class_id)
        require_member(record, requester_id)
        return record.channel_list

    def create_channel(self, class_id: str, requester_id: str, raw_name: str) -> str:
        """Add a channel to the class.

        Args:
            class_id: Class to add the channel to.
            requester_id: Must be the class instructor.
            raw_name: Name as typed by the user.

        Returns:
            The normalized channel name.

        Raises:
            ClassNotFoundError: If class not found.
            NotAuthorizedError: If requester is not the instructor.
            ValidationError: If the name is blank.
            AlreadyExistsError: If the normalized name already exists.
        """
        record = self.classes.get_class(class_id)
        require_instructor(record, requester_id, "Only instructors can create channels")
        if not (raw_name or "").strip():
            raise ValidationError("Channel name is required")

        name = normalize_channel_name(raw_name)
        channels = record.channel_list
        if name in channels:
            raise AlreadyExistsError("Channel already exists")

        self._write_channels(record, channels + [name])
        logger.info("Created channel #%s in class %s", name, class_id)
        return name

    def delete_channel(self, class_id: str, requester_id: str, name: str) -> None:
        """Remove a channel and every message posted to it.

        Raises:
            InvalidOperationError: If the channel is one of the defaults.
            ClassNotFoundError: If class not found.
            NotAuthorizedError: If requester is not the instructor.
            ChannelNotFoundError: If the class has no such channel.
        """
        if name in DEFAULT_CHANNELS:
            raise InvalidOperationError("Cannot delete default channels")
        record = self.classes.get_class(class_id)
        require_instructor(record, requester_id, "Only instructors can delete channels")

        channels = record.channel_list
        if name not in channels:
            raise ChannelNotFoundError(name)

        self._write_channels(record, [c for c in channels if c != name])
        deleted = self.store.delete_by_filter(
            MessageModel,
            MessageModel.class_id == class_id,
            MessageModel.channel == name,
        )
        logger.info(
            "Deleted channel #%s in class %s (%d messages)", name, class_id, deleted
        )
