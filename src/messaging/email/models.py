"""Pydantic models for the Resend email API."""

from pydantic import BaseModel, Field


class SendEmailRequest(BaseModel):
    """Request body for the Resend send-email endpoint."""

    from_address: str = Field(..., serialization_alias="from")
    to: list[str]
    subject: str
    html: str


class SendEmailResult(BaseModel):
    """Result of a successful send."""

    id: str | None = Field(default=None, description="Resend message ID")
