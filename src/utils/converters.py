"""Conversions between SQLAlchemy models and schema records."""

from models.class_model import ClassModel
from models.message import MessageModel
from schemas.class_schema import ClassRecord, MessageRecord


def model_to_class_record(model: ClassModel) -> ClassRecord:
    return ClassRecord(
        class_id=model.class_id,
        name=model.name,
        description=model.description,
        instructor_id=model.instructor_id,
        members=list(model.members or []),
        invitation_code=model.invitation_code,
        invitation_code_expires=model.invitation_code_expires,
        channels=list(model.channels) if model.channels is not None else None,
        version=model.version,
        created_at=model.created_at,
        updated_at=model.updated_at,
    )


def class_record_to_model(record: ClassRecord) -> ClassModel:
    return ClassModel(
        class_id=record.class_id,
        name=record.name,
        description=record.description,
        instructor_id=record.instructor_id,
        members=list(record.members),
        invitation_code=record.invitation_code,
        invitation_code_expires=record.invitation_code_expires,
        channels=record.channels,
        version=record.version,
        created_at=record.created_at,
        updated_at=record.updated_at,
    )


def model_to_message_record(model: MessageModel) -> MessageRecord:
    return MessageRecord(
        message_id=model.message_id,
        class_id=model.class_id,
        sender_id=model.sender_id,
        content=model.content,
        channel=model.channel,
        assignment_id=model.assignment_id,
        created_at=model.created_at,
        updated_at=model.updated_at,
    )


def message_record_to_model(record: MessageRecord) -> MessageModel:
    return MessageModel(
        message_id=record.message_id,
        class_id=record.class_id,
        sender_id=record.sender_id,
        content=record.content,
        channel=record.channel,
        assignment_id=record.assignment_id,
        created_at=record.created_at,
        updated_at=record.updated_at,
    )
