"""Dependency injection module for FastAPI.

This module provides dependency injection functions for FastAPI routes.
"""

from typing import Annotated, Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from core.database import get_db
from core.identity import IdentityResolver
from core.store import DocumentStore
from schemas.identity import Identity
from utils import channel_registry
from utils import class_manager
from utils import message_manager

# auto_error=False so a missing header reaches our 401 handling
security = HTTPBearer(auto_error=False)


def get_identity_resolver(request: Request) -> IdentityResolver:
    """Get the IdentityResolver owned by the running application."""
    return request.app.state.identity_resolver


def get_current_identity(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    resolver: IdentityResolver = Depends(get_identity_resolver),
) -> Identity:
    """Resolve the caller from the Authorization header.

    Raises:
        UnauthenticatedError: If the header is missing or the token is invalid.
    """
    token = credentials.credentials if credentials else None
    return resolver.resolve(token)


def get_document_store(db: Session = Depends(get_db)) -> DocumentStore:
    """Get DocumentStore instance with request-scoped DB session."""
    return DocumentStore(db)


def get_class_manager(
    store: DocumentStore = Depends(get_document_store),
) -> class_manager.ClassManager:
    """Get ClassManager instance with request-scoped DB session."""
    return class_manager.ClassManager(store)


def get_channel_registry(
    store: DocumentStore = Depends(get_document_store),
) -> channel_registry.ChannelRegistry:
    return channel_registry.ChannelRegistry(store)


def get_message_manager(
    store: DocumentStore = Depends(get_document_store),
) -> message_manager.MessageManager:
    return message_manager.MessageManager(store)


# Type aliases for dependency injection
CurrentIdentityDep = Annotated[Identity, Depends(get_current_identity)]
ClassManagerDep = Annotated[
    class_manager.ClassManager, Depends(get_class_manager)
]
ChannelRegistryDep = Annotated[
    channel_registry.ChannelRegistry, Depends(get_channel_registry)
]
MessageManagerDep = Annotated[
    message_manager.MessageManager, Depends(get_message_manager)
]
