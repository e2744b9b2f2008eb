"""Identity schema definitions."""

from typing import Optional

from pydantic import BaseModel, Field


class Identity(BaseModel):
    """The authenticated caller of a request."""

    user_id: str = Field(description="Stable user id from the identity provider.")
    role: Optional[str] = Field(
        default=None,
        description="Platform-wide role claim. Class roles are derived separately.",
    )
