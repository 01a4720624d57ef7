"""Shared API response models."""

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """Body of an error response, as produced by ``HTTPException``."""

    detail: str = Field(..., description="Error description")
