"""
DevCamper Backend — Shared Response Schemas
=============================================

What:  Envelope pieces shared by every resource: pagination descriptors,
       the error envelope and the health payload.
Why:   Documented once for the OpenAPI schema. Listing payloads themselves
       are plain documents because `select` can project any subset of fields.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class PageLink(BaseModel):
    page: int = Field(ge=1)
    limit: int = Field(ge=1)


class Pagination(BaseModel):
    """`next`/`prev` are omitted, not null, when there is no such page."""

    next: Optional[PageLink] = None
    prev: Optional[PageLink] = None


class ListResponse(BaseModel):
    """
    What:  Envelope returned by the advanced listing endpoints.

    Example:
        {
            "success": true,
            "count": 2,
            "pagination": {"prev": {"page": 1, "limit": 2}},
            "data": [{"id": "...", "name": "Devworks Bootcamp"}, ...]
        }
    """

    success: bool = True
    count: int
    pagination: Pagination
    data: List[Dict[str, Any]]


class ErrorResponse(BaseModel):
    """
    What:  Error envelope for every failure the API reports.

    Example:
        {
            "success": false,
            "error": "Bootcamp not found with id of 5d725a1b7b292f5f8ceff788",
            "request_id": "550e8400-e29b-41d4-a716-446655440000"
        }
    """

    success: bool = False
    error: str = Field(description="Human-readable error description")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    """
    What:  Health check response showing service and dependency status.
    Who:   Returned by GET /health for monitoring and load balancer checks.
    """

    status: str = Field(description="Overall service status: healthy, degraded, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    geocoder: str = Field(description="Geocoder status: configured, not_configured")
    uptime_seconds: float = Field(description="Seconds since service started")
