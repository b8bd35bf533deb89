"""Response DTOs for API endpoints."""

from datetime import datetime

from pydantic import BaseModel, Field


class SourceItem(BaseModel):
    """Single citation source (in sources array)."""

    uri: str = Field(..., description="Source URL")
    title: str = Field(..., description="Source page title")


class HoroscopeResponse(BaseModel):
    """Response DTO for one horoscope artifact."""

    sign: str = Field(..., description="Zodiac sign (canonical value)")
    period: str = Field(..., description="Forecast period (canonical value)")
    summary: str = Field(..., description="Short teaser text")
    details: str = Field(..., description="Long-form forecast")
    image_data: str | None = Field(None, description="Image as a base64 data URI")
    sources: list[SourceItem] = Field(
        default_factory=list,
        description="Web sources the forecast was grounded on",
    )
    generated_at: datetime = Field(..., description="When the content was generated (UTC)")
    error: str | None = Field(
        None,
        description="Set only when this period failed to generate in a batch request",
    )


class InvalidateResponse(BaseModel):
    """Response DTO for deleting a stored horoscope."""

    sign: str = Field(..., description="Zodiac sign (canonical value)")
    period: str = Field(..., description="Forecast period (canonical value)")
    deleted: bool = Field(..., description="Whether a stored record was removed")


class ZodiacResponse(BaseModel):
    """Response DTO for the sign of a birth date."""

    sign: str = Field(..., description="Zodiac sign (canonical value)")
    sign_key: str = Field(..., description="English sign identifier, e.g. 'TAURUS'")
    emoji: str = Field(..., description="Zodiac glyph")


class ErrorResponse(BaseModel):
    """Response DTO for any failed request."""

    error: str = Field(..., description="Human-readable error message")


class HealthCheckResponse(BaseModel):
    """Response DTO for health check."""

    status: str = Field(..., description="Health status: 'healthy' or 'unhealthy'")
    store_healthy: bool = Field(..., description="Whether the content store is reachable")
    generator_healthy: bool = Field(..., description="Whether the generation client is configured")
