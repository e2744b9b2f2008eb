"""Class management utilities.

``ClassManager`` owns the class record: its details, its member list and its
invitation code. Every write is a compare-and-swap against the version read
just before, so two concurrent role changes cannot silently overwrite each
other.
"""

import logging
import re
import secrets
from datetime import datetime, timedelta
from typing import List, Optional, Tuple

import pytz
from sqlalchemy import String, cast, or_

from config import (
    CLASS_DESCRIPTION_MAX_LENGTH,
    CLASS_NAME_MAX_LENGTH,
    INVITATION_CODE_LENGTH,
    INVITATION_CODE_TTL_DAYS,
)
from core.exceptions import (
    AlreadyMemberError,
    ClassNotFoundError,
    InvalidOperationError,
    InvitationCodeNotFoundError,
    NotMemberError,
    ValidationError,
)
from core.store import DocumentStore
from models.class_model import ClassModel
from models.message import MessageModel
from schemas.class_schema import ClassRecord
from utils.converters import class_record_to_model, model_to_class_record
from utils.ids import new_id
from utils.membership_gate import Role, is_instructor, require_instructor, resolve_role

logger = logging.getLogger(__name__)

ROLE_INSTRUCTOR = "instructor"
ROLE_STUDENT = "student"
ASSIGNABLE_ROLES = (ROLE_INSTRUCTOR, ROLE_STUDENT)

NOT_INSTRUCTOR_MESSAGE = "Class not found or you are not the instructor"


def make_invitation_code() -> str:
    """Generate a 6-character uppercase invitation code.

    Hex-encodes random bytes, so the result is already alphanumeric; the
    substitution only guards the format. Uniqueness is not checked here.
    """
    raw = secrets.token_bytes(INVITATION_CODE_LENGTH // 2).hex().upper()
    return re.sub(r"[^A-Z0-9]", "0", raw)[:INVITATION_CODE_LENGTH]


def _parse_timestamp(value: str) -> datetime:
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


def is_invitation_live(expires_at: Optional[str], now: Optional[datetime] = None) -> bool:
    """Return True while ``now`` is strictly before ``expires_at``."""
    if not expires_at:
        return False
    now = now or datetime.now(pytz.utc)
    return now < _parse_timestamp(expires_at)


def _validate_details(name: Optional[str], description: Optional[str]) -> Tuple[str, str]:
    name = (name or "").strip()
    description = (description or "").strip()
    if not name or not description:
        raise ValidationError("Name and description are required")
    if len(name) > CLASS_NAME_MAX_LENGTH:
        raise ValidationError(
            f"Class name cannot be more than {CLASS_NAME_MAX_LENGTH} characters"
        )
    if len(description) > CLASS_DESCRIPTION_MAX_LENGTH:
        raise ValidationError(
            f"Description cannot be more than {CLASS_DESCRIPTION_MAX_LENGTH} characters"
        )
    return name, description


class ClassManager:
    """Manages class, membership, and invitation operations."""

    def __init__(self, store: DocumentStore):
        self.store = store

    def _save(self, record: ClassRecord, **fields) -> ClassRecord:
        """Write changed fields back, guarded by the record's version."""
        fields["updated_at"] = datetime.now(pytz.utc).isoformat()
        self.store.update_fields(
            ClassModel,
            ClassModel.class_id,
            record.class_id,
            fields,
            expected_version=record.version,
        )
        fields["version"] = record.version + 1
        return record.model_copy(update=fields)

    def _get_instructed_class(self, class_id: str, user_id: str) -> ClassRecord:
        """Load a class the user instructs.

        Missing classes and classes instructed by someone else both raise
        the same not-found error.
        """
        record = self.get_class(class_id)
        if not is_instructor(record, user_id):
            raise ClassNotFoundError(class_id, NOT_INSTRUCTOR_MESSAGE)
        return record

    # --- Class records ---

    def create_class(self, instructor_id: str, name: str, description: str) -> ClassRecord:
        """Create a new class owned by ``instructor_id``.

        The creator becomes the instructor and is also listed as a member.

        Raises:
            ValidationError: If name or description is empty or too long.
        """
        name, description = _validate_details(name, description)
        now = datetime.now(pytz.utc).isoformat()
        record = ClassRecord(
            class_id=new_id(),
            name=name,
            description=description,
            instructor_id=instructor_id,
            members=[instructor_id],
            created_at=now,
            updated_at=now,
        )
        self.store.insert(class_record_to_model(record))
        logger.info("Created class %s (instructor=%s)", record.class_id, instructor_id)
        return record

    def get_class(self, class_id: str) -> ClassRecord:
        model = self.store.find_by_id(ClassModel, ClassModel.class_id, class_id)
        if not model:
            raise ClassNotFoundError(class_id)
        return model_to_class_record(model)

    def get_class_for_user(self, class_id: str, user_id: str) -> ClassRecord:
        """Load a class the user belongs to; anyone else gets not-found."""
        record = self.get_class(class_id)
        if resolve_role(record, user_id) is Role.NON_MEMBER:
            raise ClassNotFoundError(class_id)
        return record

    def list_classes_for_user(self, user_id: str) -> List[ClassRecord]:
        """List classes the user instructs or belongs to, newest first."""
        models = self.store.find_by_filter(
            ClassModel,
            or_(
                ClassModel.instructor_id == user_id,
                cast(ClassModel.members, String).like(f'%"{user_id}"%'),
            ),
            order_by=[ClassModel.created_at.desc()],
        )
        records = [model_to_class_record(model) for model in models]
        # The LIKE prefilter can over-match; the membership check is exact
        return [r for r in records if resolve_role(r, user_id) is not Role.NON_MEMBER]

    def update_class(
        self, class_id: str, requester_id: str, name: str, description: str
    ) -> ClassRecord:
        name, description = _validate_details(name, description)
        record = self._get_instructed_class(class_id, requester_id)
        return self._save(record, name=name, description=description)

    def delete_class(self, class_id: str, requester_id: str) -> None:
        """Delete a class and all of its messages.

        Only the instructor can delete the class.

        Raises:
            ClassNotFoundError: If class not found or requester is not the instructor.
        """
        self._get_instructed_class(class_id, requester_id)
        deleted = self.store.delete_by_filter(MessageModel, MessageModel.class_id == class_id)
        self.store.delete_by_filter(ClassModel, ClassModel.class_id == class_id)
        logger.info("Deleted class %s (%d messages)", class_id, deleted)

    # --- Invitation codes ---

    def generate_invitation_code(self, class_id: str, requester_id: str) -> Tuple[str, str]:
        """Issue a fresh invitation code, replacing any previous one.

        Args:
            class_id: Class to invite into.
            requester_id: Must be the class instructor.

        Returns:
            Tuple of (code, expiry ISO timestamp).

        Raises:
            ClassNotFoundError: If class not found.
            NotAuthorizedError: If requester is not the instructor.
            StoreUnavailableError: If the store rejects the write, including
                when the code collides with another class's code.
        """
        record = self.get_class(class_id)
        require_instructor(
            record, requester_id, "Only the instructor can manage invitation codes"
        )
        code = make_invitation_code()
        expires_at = (
            datetime.now(pytz.utc) + timedelta(days=INVITATION_CODE_TTL_DAYS)
        ).isoformat()
        self._save(record, invitation_code=code, invitation_code_expires=expires_at)
        logger.info("Generated invitation code for class %s, expires %s", class_id, expires_at)
        return code, expires_at

    def revoke_invitation_code(self, class_id: str, requester_id: str) -> None:
        record = self.get_class(class_id)
        require_instructor(
            record, requester_id, "Only the instructor can manage invitation codes"
        )
        self._save(record, invitation_code=None, invitation_code_expires=None)
        logger.info("Revoked invitation code for class %s", class_id)

    def redeem_invitation_code(
        self, code: str, user_id: str, class_id: Optional[str] = None
    ) -> ClassRecord:
        """Join a class using an invitation code.

        Args:
            code: Invitation code.
            user_id: User joining the class.
            class_id: Optional class the code must belong to.

        Returns:
            The joined class.

        Raises:
            ValidationError: If no code was given.
            InvitationCodeNotFoundError: If the code is wrong or expired.
            AlreadyMemberError: If the user is already a member.
        """
        code = (code or "").strip()
        if not code:
            raise ValidationError("Invitation code is required")

        criteria = [ClassModel.invitation_code == code]
        if class_id is not None:
            criteria.append(ClassModel.class_id == class_id)
        model = self.store.find_one(ClassModel, *criteria)
        if not model:
            raise InvitationCodeNotFoundError()

        record = model_to_class_record(model)
        if not is_invitation_live(record.invitation_code_expires):
            raise InvitationCodeNotFoundError()
        if user_id in record.members:
            raise AlreadyMemberError("You are already a member of this class")

        record = self._save(record, members=record.members + [user_id])
        logger.info("User %s joined class %s by invitation", user_id, record.class_id)
        return record

    # --- Membership ---

    def add_member(self, class_id: str, requester_id: str, member_id: str) -> ClassRecord:
        record = self.get_class(class_id)
        require_instructor(record, requester_id, "Only the instructor can add members")
        if member_id in record.members:
            raise AlreadyMemberError()
        record = self._save(record, members=record.members + [member_id])
        logger.info("Added member %s to class %s", member_id, class_id)
        return record

    def remove_member(self, class_id: str, requester_id: str, target_user_id: str) -> ClassRecord:
        """Remove a member; removing a non-member changes nothing."""
        record = self._get_instructed_class(class_id, requester_id)
        if target_user_id not in record.members:
            return record
        record = self._save(
            record, members=[m for m in record.members if m != target_user_id]
        )
        logger.info("Removed member %s from class %s", target_user_id, class_id)
        return record

    def leave_class(self, class_id: str, user_id: str) -> None:
        """Leave a class (remove the user's membership).

        The instructor cannot leave; they must hand the class over with
        ``change_role`` or delete it.

        Raises:
            ClassNotFoundError: If class not found.
            InvalidOperationError: If the user is the instructor.
            NotMemberError: If the user is not a member.
        """
        record = self.get_class(class_id)
        if is_instructor(record, user_id):
            raise InvalidOperationError(
                "Instructors cannot leave their own class. Please delete the class instead."
            )
        if user_id not in record.members:
            raise NotMemberError()
        self._save(record, members=[m for m in record.members if m != user_id])
        logger.info("User %s left class %s", user_id, class_id)

    def change_role(
        self, class_id: str, requester_id: str, target_user_id: str, role: str
    ) -> ClassRecord:
        """Assign a role to a user in the class.

        ``instructor`` hands the single instructor slot to the target; the
        previous instructor stays on as a member. ``student`` makes sure the
        target is a member and leaves the instructor alone.

        Raises:
            ValidationError: If role is not 'instructor' or 'student'.
            ClassNotFoundError: If class not found or requester is not the instructor.
            ConcurrentModificationError: If the class changed since it was read.
        """
        if role not in ASSIGNABLE_ROLES:
            raise ValidationError("Invalid role")
        record = self._get_instructed_class(class_id, requester_id)

        if role == ROLE_INSTRUCTOR:
            members = list(record.members)
            if requester_id not in members:
                members.append(requester_id)
            record = self._save(record, instructor_id=target_user_id, members=members)
            logger.info(
                "Class %s instructor changed from %s to %s",
                class_id,
                requester_id,
                target_user_id,
            )
            return record

        if target_user_id in record.members:
            return record
        return self._save(record, members=record.members + [target_user_id])
