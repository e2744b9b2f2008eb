"""Custom exception classes for the class workspace service.

Every failure the service reports carries a stable machine-readable ``kind``
and the HTTP status it maps to at the API boundary. Messages are short and
never include stack traces.
"""

from typing import Optional


class ClassWorkspaceError(Exception):
    """Base exception for all class workspace errors."""

    kind = "Error"
    status_code = 500
    default_message = "Request failed"

    def __init__(self, message: Optional[str] = None):
        """Initialize the exception.

        Args:
            message: Human-readable message. Falls back to the class default.
        """
        self.message = message or self.default_message
        super().__init__(self.message)


class UnauthenticatedError(ClassWorkspaceError):
    """Raised when a request carries no valid identity."""

    kind = "Unauthenticated"
    status_code = 401
    default_message = "Unauthorized"


class NotAuthorizedError(ClassWorkspaceError):
    """Raised when an identity lacks the role an operation needs."""

    kind = "NotAuthorized"
    status_code = 403
    default_message = "Not authorized"


class ValidationError(ClassWorkspaceError):
    """Raised when data validation fails."""

    kind = "ValidationError"
    status_code = 400
    default_message = "Invalid request"


class NotFoundError(ClassWorkspaceError):
    """Raised when an entity does not exist."""

    kind = "NotFound"
    status_code = 404
    default_message = "Not found"


class ClassNotFoundError(NotFoundError):
    """Raised when a requested class cannot be found."""

    def __init__(self, class_id: str, message: Optional[str] = None):
        """Initialize the exception.

        Args:
            class_id: The ID of the class that was not found.
            message: Optional message overriding the default.
        """
        self.class_id = class_id
        super().__init__(message or "Class not found")


class MessageNotFoundError(NotFoundError):
    """Raised when a requested message cannot be found."""

    def __init__(self, message_id: str):
        self.message_id = message_id
        super().__init__("Message not found")


class ChannelNotFoundError(NotFoundError):
    """Raised when a channel is not part of a class."""

    def __init__(self, channel_name: str):
        self.channel_name = channel_name
        super().__init__("Channel not found")


class InvitationCodeNotFoundError(NotFoundError):
    """Raised when an invitation code is wrong or expired.

    Both cases share this error so callers cannot tell which one happened.
    """

    default_message = "Invalid or expired invitation code"


class AlreadyMemberError(ClassWorkspaceError):
    """Raised when a user is already a member of the class."""

    kind = "AlreadyMember"
    status_code = 400
    default_message = "User is already a member of this class"


class AlreadyExistsError(ClassWorkspaceError):
    """Raised when creating something that already exists."""

    kind = "AlreadyExists"
    status_code = 400
    default_message = "Already exists"


class NotMemberError(ClassWorkspaceError):
    """Raised when a user is expected to be a member but is not."""

    kind = "NotMember"
    status_code = 400
    default_message = "You are not a member of this class"


class InvalidOperationError(ClassWorkspaceError):
    """Raised when an operation is not allowed in the current state."""

    kind = "InvalidOperation"
    status_code = 400
    default_message = "Operation not allowed"


class ConcurrentModificationError(ClassWorkspaceError):
    """Raised when a record changed between read and write."""

    kind = "Conflict"
    status_code = 409
    default_message = "The class was modified concurrently, please retry"


class StoreUnavailableError(ClassWorkspaceError):
    """Raised when the document store fails."""

    kind = "StoreUnavailable"
    status_code = 500
    default_message = "Internal server error"
