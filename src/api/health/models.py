"""Response model for the health check."""

from pydantic import BaseModel, Field

SERVICE_NAME = "taskflow-reminders"


class HealthResponse(BaseModel):
    """Liveness of the reminder trigger API."""

    status: str = Field(..., description="Service health status")
    service: str = Field(default=SERVICE_NAME, description="Service name")
    version: str = Field(..., description="Application version")
