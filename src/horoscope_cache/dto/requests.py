"""Request DTOs for API endpoints."""

from pydantic import BaseModel, Field


class HoroscopeRequest(BaseModel):
    """Request DTO for a single (sign, period) horoscope.

    Fields are optional here so that missing values reach the service and
    fail with the same BadRequest as unrecognized ones.
    """

    sign: str | None = Field(None, description="Zodiac sign, e.g. 'Телец' or 'TAURUS'")
    period: str | None = Field(None, description="Forecast period, e.g. 'Год' or 'YEAR'")


class SignHoroscopesRequest(BaseModel):
    """Request DTO for all five periods of a sign."""

    sign: str | None = Field(None, description="Zodiac sign, e.g. 'Телец' or 'TAURUS'")
