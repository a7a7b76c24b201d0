"""
Pydantic models for the stored paste record and request/response validation.
"""
from typing import Optional
from pydantic import BaseModel, Field, StrictInt, StrictStr


class PasteRecord(BaseModel):
    """A paste as persisted by the record store."""
    id: str = Field(..., description="Unique paste ID")
    content: str = Field(..., description="Text content, immutable")
    created_at: int = Field(..., description="Creation time (ms since epoch, UTC)")
    ttl_seconds: Optional[int] = Field(None, description="Time-to-live in seconds (null if none)")
    max_views: Optional[int] = Field(None, description="View budget (null if unlimited)")
    views_count: int = Field(0, ge=0, description="Consuming reads so far")


class PasteCreate(BaseModel):
    """Schema for creating a new paste.

    Range checks (non-blank content, values >= 1) live in the service so
    they apply to every caller, not only HTTP.
    """
    content: StrictStr = Field(..., description="Text content (required, non-empty)")
    ttl_seconds: Optional[StrictInt] = Field(None, description="Optional TTL in seconds")
    max_views: Optional[StrictInt] = Field(None, description="Optional view limit")


class PasteResponse(BaseModel):
    """Schema for paste creation response."""
    id: str = Field(..., description="Unique paste ID")
    url: str = Field(..., description="Shareable URL to view the paste")


class PasteView(BaseModel):
    """Schema for viewing/fetching a paste."""
    content: str = Field(..., description="Paste text content")
    remaining_views: Optional[int] = Field(None, description="Views left (null if unlimited)")
    expires_at: Optional[str] = Field(None, description="Expiry timestamp (ISO 8601, null if no TTL)")


class PasteMetadata(BaseModel):
    """Schema for a status check that does not consume a view."""
    remaining_views: Optional[int] = Field(None, description="Views left (null if unlimited)")
    expires_at: Optional[str] = Field(None, description="Expiry timestamp (ISO 8601, null if no TTL)")
    is_available: bool = Field(..., description="Would a fetch right now succeed?")


class HealthCheck(BaseModel):
    """Schema for health check response."""
    ok: bool = Field(..., description="Is the application healthy?")


class ErrorResponse(BaseModel):
    """Schema for error responses."""
    error: str = Field(..., description="Human-readable error message")
