"""Repository layer for data access.

This layer abstracts external dependencies (Redis, the Gemini API) behind
protocol-based interfaces. This enables:
- Easy swapping of implementations (Redis → SQL, Gemini → another provider)
- Unit testing with fake implementations
- Clear separation of concerns

The repositories are protocol-based (structural typing), not inheritance-based.
Any class implementing the required methods will satisfy the protocol.
"""

from horoscope_cache.protocols import ContentStore, GenerationClient

from .gemini_generation_client import GeminiGenerationClient, ImagePolicy
from .memory_repository import InMemoryContentRepository
from .redis_repository import RedisContentRepository

__all__ = [
    "ContentStore",
    "GenerationClient",
    "RedisContentRepository",
    "InMemoryContentRepository",
    "GeminiGenerationClient",
    "ImagePolicy",
]
