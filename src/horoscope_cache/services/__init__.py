"""Service layer for business logic.

This layer contains the core business logic and orchestration.
Services depend on protocols (interfaces), not concrete implementations,
making them testable and flexible.

Architecture:
    Handler -> Service -> Repository
    (HTTP)  -> (Business) -> (Data Access)

Usage:
    ```python
    from horoscope_cache.services import HoroscopeService

    service = HoroscopeService.create(store=store, generator=generator)
    ```
"""

from .horoscope_service import PLACEHOLDER_SUMMARY, BatchFailurePolicy, HoroscopeService
from .parser import parse_artifact
from .retry import RetryPolicy, with_retry

__all__ = [
    "HoroscopeService",
    "BatchFailurePolicy",
    "PLACEHOLDER_SUMMARY",
    "RetryPolicy",
    "with_retry",
    "parse_artifact",
]
