"""Protocol interfaces for swappable implementations.

This package contains protocol definitions using structural typing.
Protocols enable:
- Easy swapping of implementations (Redis → SQL, Gemini → another provider)
- Unit testing with fake implementations
- Clear separation of concerns

Usage:
    ```python
    from horoscope_cache.protocols import ContentStore, GenerationClient

    store: ContentStore = InMemoryContentRepository()
    generator: GenerationClient = GeminiGenerationClient.create()
    ```
"""

from .content_store import ContentStore
from .generation_client import GenerationClient

__all__ = [
    "ContentStore",
    "GenerationClient",
]
