"""Pydantic models for health responses and error bodies."""

from datetime import datetime

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Basic health check response."""

    status: str
    version: str


class DetailedHealthResponse(BaseModel):
    """Readiness response with the status of each shared resource."""

    status: str = Field(..., description="Overall health status: healthy or unhealthy")
    version: str = Field(..., description="Application version")
    timestamp: datetime = Field(..., description="Current server timestamp")
    checks: dict[str, str] = Field(..., description="Individual health check results")


class ErrorDetail(BaseModel):
    """Structured error body returned for AutoFormatException subclasses."""

    code: str
    message: str
    details: dict = Field(default_factory=dict)
