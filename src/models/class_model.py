from sqlalchemy import JSON, Column, Integer, String
from sqlalchemy.orm import relationship
from .base import Base


class ClassModel(Base):
    __tablename__ = "classes"

    class_id = Column(String, primary_key=True, index=True)
    name = Column(String, nullable=False)
    description = Column(String, nullable=False)
    instructor_id = Column(String, index=True, nullable=False)
    members = Column(JSON, nullable=False, default=list)  # list of user ids
    # NULL for classes without an active invite; unique among the rest
    invitation_code = Column(String, unique=True, index=True, nullable=True)
    invitation_code_expires = Column(String, nullable=True)  # ISO format string
    channels = Column(JSON, nullable=True)  # NULL means the default channels
    version = Column(Integer, nullable=False, default=1)
    created_at = Column(String, nullable=False)
    updated_at = Column(String, nullable=False)

    messages = relationship(
        "MessageModel",
        back_populates="class_",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
