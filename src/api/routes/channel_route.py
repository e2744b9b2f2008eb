"""Channel routes."""

from fastapi import APIRouter

from core.dependencies import ChannelRegistryDep, CurrentIdentityDep
from schemas.class_schema import (
    AckResponse,
    ChannelCreatedResponse,
    ChannelListResponse,
    CreateChannelRequest,
)
from utils.ids import ensure_valid_id

router = APIRouter(prefix="/api/classes/{class_id}/channels", tags=["Channel"])


@router.get("", response_model=ChannelListResponse, summary="List channels")
def list_channels(
    class_id: str, registry: ChannelRegistryDep, identity: CurrentIdentityDep
) -> ChannelListResponse:
    ensure_valid_id(class_id, "class ID")
    channels = registry.list_channels(class_id, identity.user_id)
    return ChannelListResponse(channels=channels)


@router.post("", response_model=ChannelCreatedResponse, summary="Create a channel")
def create_channel(
    class_id: str,
    req: CreateChannelRequest,
    registry: ChannelRegistryDep,
    identity: CurrentIdentityDep,
) -> ChannelCreatedResponse:
    """Create a channel. The name is normalized, e.g. "Hw #1!" becomes "hw--1-"."""
    ensure_valid_id(class_id, "class ID")
    name = registry.create_channel(class_id, identity.user_id, req.name)
    return ChannelCreatedResponse(channel_name=name)


@router.delete("/{channel_name}", response_model=AckResponse, summary="Delete a channel")
def delete_channel(
    class_id: str,
    channel_name: str,
    registry: ChannelRegistryDep,
    identity: CurrentIdentityDep,
) -> AckResponse:
    ensure_valid_id(class_id, "class ID")
    registry.delete_channel(class_id, identity.user_id, channel_name)
    return AckResponse(message=f"Channel #{channel_name} deleted successfully")
