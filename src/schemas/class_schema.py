"""Class and message schema definitions.

Records (``ClassRecord``, ``MessageRecord``) are the plain data the managers
pass around. The request and info models define the JSON shapes of the HTTP
API, which uses camelCase field names on the wire.
"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

import config


class ClassRecord(BaseModel):
    """A class as stored in the document store."""

    class_id: str
    name: str
    description: str
    instructor_id: str
    members: List[str] = Field(default_factory=list)
    invitation_code: Optional[str] = None
    invitation_code_expires: Optional[str] = None
    channels: Optional[List[str]] = Field(
        default=None,
        description="Stored channel names; None means the default channels.",
    )
    version: int = 1
    created_at: str
    updated_at: str

    @property
    def channel_list(self) -> List[str]:
        if self.channels is None:
            return list(config.DEFAULT_CHANNELS)
        return list(self.channels)


class MessageRecord(BaseModel):
    """A message as stored in the document store."""

    message_id: str
    class_id: str
    sender_id: str
    content: str
    channel: str = config.DEFAULT_CHANNEL
    assignment_id: Optional[str] = None
    created_at: str
    updated_at: str


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


# --- Requests ---


class CreateClassRequest(_CamelModel):
    name: Optional[str] = None
    description: Optional[str] = None


class UpdateClassRequest(CreateClassRequest):
    pass


class InvitationActionRequest(_CamelModel):
    action: Optional[str] = Field(default=None, description="'generate' or 'revoke'")


class RedeemInvitationRequest(_CamelModel):
    invitation_code: Optional[str] = Field(default=None, alias="invitationCode")


class AddMemberRequest(_CamelModel):
    member_id: Optional[str] = Field(default=None, alias="memberId")


class ChangeRoleRequest(_CamelModel):
    role: Optional[str] = Field(default=None, description="'instructor' or 'student'")


class CreateChannelRequest(_CamelModel):
    name: Optional[str] = None


class PostMessageRequest(_CamelModel):
    content: Optional[str] = None
    channel: str = config.DEFAULT_CHANNEL
    assignment_id: Optional[str] = Field(default=None, alias="assignmentId")


class EditMessageRequest(_CamelModel):
    content: Optional[str] = None


# --- Responses ---


class ClassInfo(_CamelModel):
    id: str
    name: str
    description: str
    instructor_id: str = Field(alias="instructorId")
    members: List[str]
    channels: List[str]
    invitation_code: Optional[str] = Field(default=None, alias="invitationCode")
    invitation_code_expires: Optional[str] = Field(
        default=None, alias="invitationCodeExpires"
    )
    role_in_class: Optional[str] = Field(default=None, alias="roleInClass")
    created_at: str = Field(alias="createdAt")
    updated_at: str = Field(alias="updatedAt")


class MessageInfo(_CamelModel):
    id: str
    class_id: str = Field(alias="classId")
    sender_id: str = Field(alias="senderId")
    content: str
    channel: str
    assignment_id: Optional[str] = Field(default=None, alias="assignmentId")
    created_at: str = Field(alias="createdAt")
    updated_at: str = Field(alias="updatedAt")


class EditedMessageInfo(_CamelModel):
    id: str
    content: str
    updated_at: str = Field(alias="updatedAt")


# --- Response envelopes ---


class AckResponse(_CamelModel):
    success: bool = True
    message: str


class ClassResponse(_CamelModel):
    success: bool = True
    class_: ClassInfo = Field(alias="class")


class ClassListResponse(_CamelModel):
    success: bool = True
    classes: List[ClassInfo]


class JoinClassResponse(AckResponse):
    class_id: str = Field(alias="classId")


class InvitationCodeResponse(_CamelModel):
    success: bool = True
    invitation_code: str = Field(alias="invitationCode")
    expires: str


class ChannelListResponse(_CamelModel):
    success: bool = True
    channels: List[str]


class ChannelCreatedResponse(_CamelModel):
    success: bool = True
    channel_name: str = Field(alias="channelName")


class MessageListResponse(_CamelModel):
    success: bool = True
    messages: List[MessageInfo]


class MessageResponse(_CamelModel):
    success: bool = True
    message: MessageInfo


class EditedMessageResponse(_CamelModel):
    success: bool = True
    message: EditedMessageInfo
