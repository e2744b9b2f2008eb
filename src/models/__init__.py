"""Database models.

Importing this package registers every table with ``Base.metadata``.
"""

from .class_model import ClassModel  # noqa: F401
from .message import MessageModel  # noqa: F401
