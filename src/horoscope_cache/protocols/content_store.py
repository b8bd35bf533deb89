"""Content storage protocol.

Defines the interface for any durable backend that keeps one generated
artifact per (sign, period) key.

Implementations can include:
- Redis (default)
- In-process dictionary (local runs, tests)
- Any SQL table with a unique (sign, period) constraint
"""

from typing import Protocol, runtime_checkable

from horoscope_cache.entities import Artifact, Period, Sign


@runtime_checkable
class ContentStore(Protocol):
    """Protocol for artifact storage backends.

    Any type that implements these methods satisfies the protocol, no
    explicit inheritance needed. Every method is a coroutine and raises
    ``StoreUnavailable`` when the backend fails.

    Example:
        ```python
        from horoscope_cache.protocols import ContentStore

        store: ContentStore = RedisContentRepository.create()
        store: ContentStore = InMemoryContentRepository()
        ```
    """

    async def lookup_one(self, sign: Sign, period: Period) -> Artifact | None:
        """Fetch the artifact stored for a key.

        Args:
            sign: Zodiac sign
            period: Forecast period

        Returns:
            The stored artifact, or None on a miss
        """
        ...

    async def lookup_all_for_sign(self, sign: Sign) -> list[Artifact]:
        """Fetch every stored artifact for a sign.

        Args:
            sign: Zodiac sign

        Returns:
            Zero to five artifacts, in no particular order
        """
        ...

    async def insert_one(self, artifact: Artifact) -> None:
        """Insert an artifact under its key.

        Args:
            artifact: The artifact to persist

        Raises:
            StoreConflict: If an artifact already exists for the key
        """
        ...

    async def upsert_many(self, artifacts: list[Artifact]) -> None:
        """Insert or overwrite several artifacts in one atomic call.

        Args:
            artifacts: Artifacts to persist
        """
        ...

    async def delete_one(self, sign: Sign, period: Period) -> bool:
        """Delete the artifact stored for a key.

        Args:
            sign: Zodiac sign
            period: Forecast period

        Returns:
            True if a record was deleted, False if none existed
        """
        ...

    async def health_check(self) -> bool:
        """Check if the backend is reachable.

        Returns:
            True if healthy, False otherwise
        """
        ...
