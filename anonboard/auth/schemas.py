"""Pydantic schemas for authentication."""

from pydantic import BaseModel, ConfigDict, Field


class Principal(BaseModel):
    """Authenticated actor as carried by the access token."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    role: str = "member"
