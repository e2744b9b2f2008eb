"""Membership gate.

Resolves what a user is relative to a class before anything is changed.
Roles are always derived from ``instructor_id`` and ``members``; they are
never stored per member.
"""

from enum import Enum
from typing import Optional

from core.exceptions import NotAuthorizedError
from schemas.class_schema import ClassRecord


class Role(str, Enum):
    INSTRUCTOR = "instructor"
    MEMBER = "member"
    NON_MEMBER = "non_member"


def resolve_role(class_record: ClassRecord, user_id: str) -> Role:
    """Resolve a user's role in a class.

    The instructor check comes first, so an instructor who is not listed in
    ``members`` still resolves to ``Role.INSTRUCTOR``.

    Args:
        class_record: The class to check against.
        user_id: The acting user.

    Returns:
        The user's role.
    """
    if user_id == class_record.instructor_id:
        return Role.INSTRUCTOR
    if user_id in class_record.members:
        return Role.MEMBER
    return Role.NON_MEMBER


def is_instructor(class_record: ClassRecord, user_id: str) -> bool:
    return resolve_role(class_record, user_id) is Role.INSTRUCTOR


def require_member(class_record: ClassRecord, user_id: str) -> Role:
    """Reject non-members.

    Returns:
        The resolved role (instructor or member).

    Raises:
        NotAuthorizedError: If the user is not part of the class.
    """
    role = resolve_role(class_record, user_id)
    if role is Role.NON_MEMBER:
        raise NotAuthorizedError("Not a member of this class")
    return role


def require_instructor(class_record: ClassRecord, user_id: str, message: Optional[str] = None) -> None:
    """Reject anyone but the class instructor.

    Raises:
        NotAuthorizedError: If the user is not the instructor.
    """
    if not is_instructor(class_record, user_id):
        raise NotAuthorizedError(message or "Only the instructor can do this")
