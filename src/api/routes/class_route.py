"""Class management routes.

Covers class records, invitation codes and membership. Failures are raised
as ``ClassWorkspaceError`` subclasses and rendered by the application's
exception handlers.
"""

from typing import Union

from fastapi import APIRouter, status

from core.dependencies import ClassManagerDep, CurrentIdentityDep
from core.exceptions import ValidationError
from schemas.class_schema import (
    AckResponse,
    AddMemberRequest,
    ChangeRoleRequest,
    ClassInfo,
    ClassListResponse,
    ClassRecord,
    ClassResponse,
    CreateClassRequest,
    InvitationActionRequest,
    InvitationCodeResponse,
    JoinClassResponse,
    RedeemInvitationRequest,
    UpdateClassRequest,
)
from utils.ids import ensure_valid_id
from utils.membership_gate import Role, resolve_role

router = APIRouter(prefix="/api/classes", tags=["Class"])

ROLE_LABELS = {
    Role.INSTRUCTOR: "instructor",
    Role.MEMBER: "student",
    Role.NON_MEMBER: None,
}


def build_class_info(record: ClassRecord, viewer_id: str) -> ClassInfo:
    """Serialize a class for ``viewer_id``.

    The invitation code is only shown to the instructor.
    """
    role = resolve_role(record, viewer_id)
    show_invite = role is Role.INSTRUCTOR
    return ClassInfo(
        id=record.class_id,
        name=record.name,
        description=record.description,
        instructor_id=record.instructor_id,
        members=record.members,
        channels=record.channel_list,
        invitation_code=record.invitation_code if show_invite else None,
        invitation_code_expires=record.invitation_code_expires if show_invite else None,
        role_in_class=ROLE_LABELS[role],
        created_at=record.created_at,
        updated_at=record.updated_at,
    )


@router.get("", response_model=ClassListResponse, summary="List my classes")
def list_classes(class_manager: ClassManagerDep, identity: CurrentIdentityDep) -> ClassListResponse:
    records = class_manager.list_classes_for_user(identity.user_id)
    return ClassListResponse(
        classes=[build_class_info(r, identity.user_id) for r in records]
    )


@router.post(
    "",
    response_model=ClassResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a class",
)
def create_class(
    req: CreateClassRequest,
    class_manager: ClassManagerDep,
    identity: CurrentIdentityDep,
) -> ClassResponse:
    record = class_manager.create_class(identity.user_id, req.name, req.description)
    return ClassResponse(class_=build_class_info(record, identity.user_id))


@router.post("/join", response_model=JoinClassResponse, summary="Join a class by invitation code")
def join_class(
    req: RedeemInvitationRequest,
    class_manager: ClassManagerDep,
    identity: CurrentIdentityDep,
) -> JoinClassResponse:
    """Join whichever class currently holds the invitation code."""
    record = class_manager.redeem_invitation_code(req.invitation_code, identity.user_id)
    return JoinClassResponse(
        message="Successfully joined the class", class_id=record.class_id
    )


@router.get("/{class_id}", response_model=ClassResponse, summary="Get a class")
def get_class(class_id: str, class_manager: ClassManagerDep, identity: CurrentIdentityDep) -> ClassResponse:
    ensure_valid_id(class_id, "class ID")
    record = class_manager.get_class_for_user(class_id, identity.user_id)
    return ClassResponse(class_=build_class_info(record, identity.user_id))


@router.put("/{class_id}", response_model=ClassResponse, summary="Update class details")
def update_class(
    class_id: str,
    req: UpdateClassRequest,
    class_manager: ClassManagerDep,
    identity: CurrentIdentityDep,
) -> ClassResponse:
    ensure_valid_id(class_id, "class ID")
    record = class_manager.update_class(
        class_id, identity.user_id, req.name, req.description
    )
    return ClassResponse(class_=build_class_info(record, identity.user_id))


@router.delete("/{class_id}", response_model=AckResponse, summary="Delete a class")
def delete_class(class_id: str, class_manager: ClassManagerDep, identity: CurrentIdentityDep) -> AckResponse:
    """Delete a class and all its messages. Instructor only."""
    ensure_valid_id(class_id, "class ID")
    class_manager.delete_class(class_id, identity.user_id)
    return AckResponse(message="Class deleted successfully")


@router.post(
    "/{class_id}/invite",
    response_model=Union[InvitationCodeResponse, AckResponse],
    summary="Generate or revoke the invitation code",
)
def manage_invitation(
    class_id: str,
    req: InvitationActionRequest,
    class_manager: ClassManagerDep,
    identity: CurrentIdentityDep,
) -> Union[InvitationCodeResponse, AckResponse]:
    ensure_valid_id(class_id, "class ID")
    if req.action == "generate":
        code, expires = class_manager.generate_invitation_code(class_id, identity.user_id)
        return InvitationCodeResponse(invitation_code=code, expires=expires)
    if req.action == "revoke":
        class_manager.revoke_invitation_code(class_id, identity.user_id)
        return AckResponse(message="Invitation code revoked")
    raise ValidationError("Invalid action")


@router.put("/{class_id}/invite", response_model=AckResponse, summary="Join this class by invitation code")
def redeem_class_invitation(
    class_id: str,
    req: RedeemInvitationRequest,
    class_manager: ClassManagerDep,
    identity: CurrentIdentityDep,
) -> AckResponse:
    ensure_valid_id(class_id, "class ID")
    class_manager.redeem_invitation_code(
        req.invitation_code, identity.user_id, class_id=class_id
    )
    return AckResponse(message="Successfully joined the class")


@router.post("/{class_id}/leave", response_model=AckResponse, summary="Leave a class")
def leave_class(class_id: str, class_manager: ClassManagerDep, identity: CurrentIdentityDep) -> AckResponse:
    """Leave a class. The instructor cannot leave their own class."""
    ensure_valid_id(class_id, "class ID")
    class_manager.leave_class(class_id, identity.user_id)
    return AckResponse(message="You have left the class successfully")


@router.post("/{class_id}/members", response_model=ClassResponse, summary="Add a member")
def add_member(
    class_id: str,
    req: AddMemberRequest,
    class_manager: ClassManagerDep,
    identity: CurrentIdentityDep,
) -> ClassResponse:
    ensure_valid_id(class_id, "class ID")
    ensure_valid_id(req.member_id, "member ID")
    record = class_manager.add_member(class_id, identity.user_id, req.member_id)
    return ClassResponse(class_=build_class_info(record, identity.user_id))


@router.delete(
    "/{class_id}/members/{member_id}",
    response_model=AckResponse,
    summary="Remove a member",
)
def remove_member(
    class_id: str,
    member_id: str,
    class_manager: ClassManagerDep,
    identity: CurrentIdentityDep,
) -> AckResponse:
    ensure_valid_id(class_id, "class ID")
    ensure_valid_id(member_id, "member ID")
    class_manager.remove_member(class_id, identity.user_id, member_id)
    return AckResponse(message="Member removed successfully")


@router.put(
    "/{class_id}/members/{member_id}/role",
    response_model=AckResponse,
    summary="Change a member's role",
)
def change_member_role(
    class_id: str,
    member_id: str,
    req: ChangeRoleRequest,
    class_manager: ClassManagerDep,
    identity: CurrentIdentityDep,
) -> AckResponse:
    ensure_valid_id(class_id, "class ID")
    ensure_valid_id(member_id, "member ID")
    class_manager.change_role(class_id, identity.user_id, member_id, req.role)
    return AckResponse(message="Member role updated successfully")
