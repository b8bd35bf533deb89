"""Data Transfer Objects for API contracts.

These Pydantic models define the external API contract.
They are used for request/response validation and serialization.

Internal domain logic should use entities from the entities package.
"""

from .requests import HoroscopeRequest, SignHoroscopesRequest
from .responses import (
    ErrorResponse,
    HealthCheckResponse,
    HoroscopeResponse,
    InvalidateResponse,
    SourceItem,
    ZodiacResponse,
)

__all__ = [
    "HoroscopeRequest",
    "SignHoroscopesRequest",
    "SourceItem",
    "HoroscopeResponse",
    "InvalidateResponse",
    "ZodiacResponse",
    "ErrorResponse",
    "HealthCheckResponse",
]
