"""Redis implementation of ContentStore.

Each artifact is a JSON string stored under ``{prefix}:{SIGN}:{PERIOD}``.
It's the default implementation and satisfies the ContentStore protocol.
"""

import json
import logging
from datetime import datetime
from typing import Any

import redis.asyncio as redis
from redis.exceptions import RedisError

from horoscope_cache.config import get_redis_client, settings
from horoscope_cache.entities import CANONICAL_PERIODS, Artifact, Period, Sign, Source
from horoscope_cache.exceptions import StoreConflict, StoreUnavailable

logger = logging.getLogger(__name__)


class RedisContentRepository:
    """Redis implementation using one string key per (sign, period).

    This class satisfies the ContentStore protocol through structural
    typing - no explicit inheritance needed.

    Uses:
    - SET NX for conflict-detecting inserts
    - MGET over the five fixed period keys for per-sign lookups
    - A MULTI/EXEC pipeline for atomic bulk upserts
    - Optional TTL so Redis can expire records on its own
    """

    def __init__(
        self,
        redis_client: redis.Redis | None = None,
        key_prefix: str | None = None,
        ttl: int | None = None,
    ) -> None:
        """Initialize the Redis content repository.

        Args:
            redis_client: Asyncio Redis client. If None, creates default.
            key_prefix: Prefix for every record key.
            ttl: Record time-to-live in seconds; 0 disables expiry.
        """
        self._client = redis_client or get_redis_client()
        self._prefix = key_prefix or settings.store_key_prefix
        self._ttl = settings.record_ttl if ttl is None else ttl

    @classmethod
    def create(
        cls,
        key_prefix: str | None = None,
        ttl: int | None = None,
    ) -> "RedisContentRepository":
        """Factory method to create RedisContentRepository with defaults.

        Args:
            key_prefix: Record key prefix. If None, uses settings.
            ttl: Record TTL in seconds. If None, uses settings.

        Returns:
            Configured RedisContentRepository
        """
        return cls(key_prefix=key_prefix, ttl=ttl)

    def _key(self, sign: Sign, period: Period) -> str:
        return f"{self._prefix}:{sign.name}:{period.name}"

    @property
    def _expiry(self) -> int | None:
        return self._ttl or None

    async def lookup_one(self, sign: Sign, period: Period) -> Artifact | None:
        """Fetch the artifact stored for a key.

        Args:
            sign: Zodiac sign
            period: Forecast period

        Returns:
            The stored artifact, or None on a miss
        """
        try:
            raw = await self._client.get(self._key(sign, period))
        except RedisError as e:
            raise StoreUnavailable(f"Redis lookup failed: {e}") from e

        if raw is None:
            return None
        return deserialize_artifact(raw)

    async def lookup_all_for_sign(self, sign: Sign) -> list[Artifact]:
        """Fetch every stored artifact for a sign.

        Args:
            sign: Zodiac sign

        Returns:
            Stored artifacts in canonical period order
        """
        keys = [self._key(sign, period) for period in CANONICAL_PERIODS]
        try:
            values = await self._client.mget(keys)
        except RedisError as e:
            raise StoreUnavailable(f"Redis lookup failed: {e}") from e

        return [deserialize_artifact(raw) for raw in values if raw is not None]

    async def insert_one(self, artifact: Artifact) -> None:
        """Insert an artifact unless its key is already taken.

        Args:
            artifact: The artifact to persist

        Raises:
            StoreConflict: If a record already exists for the key
        """
        key = self._key(artifact.sign, artifact.period)
        try:
            created = await self._client.set(key, serialize_artifact(artifact), nx=True, ex=self._expiry)
        except RedisError as e:
            raise StoreUnavailable(f"Redis insert failed: {e}") from e

        if not created:
            raise StoreConflict(f"Artifact already stored for {key}")

    async def upsert_many(self, artifacts: list[Artifact]) -> None:
        """Write several artifacts in a single MULTI/EXEC transaction.

        Args:
            artifacts: Artifacts to persist
        """
        if not artifacts:
            return

        try:
            async with self._client.pipeline(transaction=True) as pipe:
                for artifact in artifacts:
                    pipe.set(
                        self._key(artifact.sign, artifact.period),
                        serialize_artifact(artifact),
                        ex=self._expiry,
                    )
                await pipe.execute()
        except RedisError as e:
            raise StoreUnavailable(f"Redis bulk upsert failed: {e}") from e

        logger.debug("Upserted %d artifacts", len(artifacts))

    async def delete_one(self, sign: Sign, period: Period) -> bool:
        """Delete the artifact stored for a key.

        Args:
            sign: Zodiac sign
            period: Forecast period

        Returns:
            True if deleted, False otherwise
        """
        try:
            result: int = await self._client.delete(self._key(sign, period))
        except RedisError as e:
            raise StoreUnavailable(f"Redis delete failed: {e}") from e
        return result > 0

    async def health_check(self) -> bool:
        """Check if Redis is accessible.

        Returns:
            True if healthy, False otherwise
        """
        try:
            return bool(await self._client.ping())
        except RedisError:
            return False

    async def close(self) -> None:
        """Close the Redis connection pool."""
        await self._client.aclose()

    @property
    def client(self) -> redis.Redis:
        """Get the Redis client."""
        return self._client


def serialize_artifact(artifact: Artifact) -> str:
    """Encode an artifact as the JSON document stored in Redis."""
    return json.dumps(
        {
            "sign": artifact.sign.name,
            "period": artifact.period.name,
            "summary": artifact.summary,
            "details": artifact.details,
            "image_data": artifact.image_data,
            "sources": [{"uri": s.uri, "title": s.title} for s in artifact.sources],
            "generated_at": artifact.generated_at.isoformat(),
            "error": artifact.error,
        },
        ensure_ascii=False,
    )


def deserialize_artifact(raw: str | bytes) -> Artifact:
    """Decode a stored JSON document back into an artifact.

    Raises:
        StoreUnavailable: If the stored record is not a valid artifact
    """
    try:
        data: dict[str, Any] = json.loads(raw)
        return Artifact(
            sign=Sign[data["sign"]],
            period=Period[data["period"]],
            summary=data["summary"],
            details=data["details"],
            image_data=data.get("image_data"),
            sources=tuple(Source(uri=s["uri"], title=s["title"]) for s in data.get("sources") or []),
            generated_at=datetime.fromisoformat(data["generated_at"]),
            error=data.get("error"),
        )
    except (json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
        raise StoreUnavailable(f"Corrupted artifact record: {e}") from e
