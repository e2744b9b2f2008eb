"""Opaque identifier helpers.

Ids are 24 lowercase hex characters, the same shape for classes, messages
and the user ids handed out by the identity provider.
"""

import re
import secrets

from core.exceptions import ValidationError

ID_LENGTH_BYTES = 12
_ID_PATTERN = re.compile(r"^[0-9a-f]{24}$")


def new_id() -> str:
    return secrets.token_hex(ID_LENGTH_BYTES)


def is_valid_id(value) -> bool:
    return isinstance(value, str) and bool(_ID_PATTERN.match(value))


def ensure_valid_id(value, label: str = "ID") -> str:
    """Return ``value`` unchanged if it is a well-formed id.

    Raises:
        ValidationError: If the id is malformed.
    """
    if not is_valid_id(value):
        raise ValidationError(f"Invalid {label}")
    return value
