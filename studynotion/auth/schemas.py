"""Pydantic schemas for authentication."""

from uuid import UUID

from pydantic import BaseModel, ConfigDict


class AuthenticatedUser(BaseModel):
    """Identity extracted from a validated access token."""

    model_config = ConfigDict(frozen=True)

    id: UUID
    email: str = ""
    role: str
