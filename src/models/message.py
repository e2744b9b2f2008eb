"""Message database model.

This module defines the Message database model using SQLAlchemy.
"""

from sqlalchemy import Column, ForeignKey, Integer, String
from sqlalchemy.orm import relationship
from .base import Base


class MessageModel(Base):
    """Message posted to a class channel."""

    __tablename__ = "messages"

    id = Column(Integer, primary_key=True, autoincrement=True)
    message_id = Column(String, unique=True, index=True, nullable=False)
    class_id = Column(
        String, ForeignKey("classes.class_id", ondelete="CASCADE"), index=True, nullable=False
    )
    sender_id = Column(String, index=True, nullable=False)
    content = Column(String, nullable=False)
    channel = Column(String, index=True, nullable=False, default="general")
    assignment_id = Column(String, nullable=True)
    created_at = Column(String, nullable=False)  # ISO format string
    updated_at = Column(String, nullable=False)  # ISO format string

    class_ = relationship("ClassModel", back_populates="messages")
