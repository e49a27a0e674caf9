"""
Storefront Edge API — Shared Response Schemas
==============================================

What:  Models shared by every route: the error body and the health report.
Why:   Clients need one error structure to parse programmatically, and the
       OpenAPI docs are generated from these models.
"""

from typing import Optional

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """
    Error body shared by every endpoint.

    Example:
        {"error": "Failed to create product", "details": "duplicate key value"}
    """

    error: str = Field(description="Human-readable error description")
    details: Optional[str] = Field(
        default=None, description="Diagnostic message from the remote store"
    )


class HealthResponse(BaseModel):
    """Health check response showing service and remote store status."""

    status: str = Field(description="Overall service status: healthy, degraded")
    version: str = Field(description="Application version")
    remote_store: str = Field(description="Remote store connectivity: connected, unreachable")
    uptime_seconds: float = Field(description="Seconds since service started")
