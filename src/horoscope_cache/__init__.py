"""Horoscope Cache - cache-aside horoscope generation with Gemini and Redis.

This package provides a layered architecture:

Layers:
    - protocols: Interface contracts (ContentStore, GenerationClient)
    - repositories: Data access implementations (Redis, in-memory, Gemini)
    - services: Business logic (orchestration, retry, parsing)
    - handlers: HTTP endpoint handlers
    - dto: Data transfer objects (API contracts)
    - entities: Domain models (internal)

Usage:
    ```python
    from horoscope_cache.repositories import GeminiGenerationClient, RedisContentRepository
    from horoscope_cache.services import HoroscopeService

    service = HoroscopeService.create(
        store=RedisContentRepository.create(),
        generator=GeminiGenerationClient.create(),
    )
    artifact = await service.get_horoscope("Телец", "Год")
    ```

For HTTP API:
    ```python
    from horoscope_cache.api.app import app
    ```
"""

from horoscope_cache.config import get_redis_client, settings
from horoscope_cache.dto import HoroscopeRequest, SignHoroscopesRequest
from horoscope_cache.entities import Artifact, Period, Sign
from horoscope_cache.exceptions import HoroscopeError
from horoscope_cache.handlers import HoroscopeHandler
from horoscope_cache.protocols import ContentStore, GenerationClient
from horoscope_cache.repositories import (
    GeminiGenerationClient,
    InMemoryContentRepository,
    RedisContentRepository,
)
from horoscope_cache.services import HoroscopeService, RetryPolicy

__all__ = [
    # Configuration
    "settings",
    "get_redis_client",
    # Protocols (interfaces)
    "ContentStore",
    "GenerationClient",
    # Services (business logic)
    "HoroscopeService",
    "RetryPolicy",
    # Handlers (HTTP)
    "HoroscopeHandler",
    # Repositories (data access)
    "RedisContentRepository",
    "InMemoryContentRepository",
    "GeminiGenerationClient",
    # Entities (domain models)
    "Artifact",
    "Sign",
    "Period",
    # Errors
    "HoroscopeError",
    # DTOs (API contracts)
    "HoroscopeRequest",
    "SignHoroscopesRequest",
]
