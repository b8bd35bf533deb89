"""Horoscope service for core business logic.

This service implements cache-aside generation by coordinating the
content store (persistence), the generation client (Gemini), the retry
policy and the artifact parser.
"""

import asyncio
import logging
from datetime import datetime, timezone
from enum import Enum

from horoscope_cache.config import settings
from horoscope_cache.entities import CANONICAL_PERIODS, Artifact, GenerationRequest, Period, Sign
from horoscope_cache.exceptions import HoroscopeError, StoreConflict
from horoscope_cache.protocols import ContentStore, GenerationClient
from horoscope_cache.services.parser import parse_artifact
from horoscope_cache.services.retry import RetryPolicy

logger = logging.getLogger(__name__)

PLACEHOLDER_SUMMARY = "Не удалось сгенерировать предсказание."


class BatchFailurePolicy(str, Enum):
    """How a batch reconciliation reacts to one period failing."""

    PLACEHOLDER = "placeholder"  # degrade that period to an error-marked artifact
    STRICT = "strict"  # fail the whole batch with the first error


class HoroscopeService:
    """Core cache-aside orchestration service.

    This service depends on PROTOCOLS, not concrete implementations:
    - ContentStore: can be Redis, in-memory, SQL, etc.
    - GenerationClient: can be Gemini or any other provider

    Two request modes:
    - ``get_horoscope``: one (sign, period), cache-or-generate
    - ``get_all_horoscopes``: all five periods of a sign, generating only
      the missing ones in parallel

    Example:
        ```python
        from horoscope_cache.services import HoroscopeService

        service = HoroscopeService.create(
            store=RedisContentRepository.create(),
            generator=GeminiGenerationClient.create(),
        )
        artifact = await service.get_horoscope("Телец", "Год")
        ```
    """

    def __init__(
        self,
        store: ContentStore,
        generator: GenerationClient,
        retry_policy: RetryPolicy | None = None,
        batch_failure_policy: BatchFailurePolicy | str | None = None,
        persist_placeholders: bool | None = None,
    ) -> None:
        """Initialize the horoscope service.

        Args:
            store: Artifact storage backend (required).
            generator: Content generation client (required).
            retry_policy: Retry policy for generation calls. Defaults to settings.
            batch_failure_policy: Batch failure handling. Defaults to settings.
            persist_placeholders: Whether batch error placeholders are stored.
                Defaults to settings.
        """
        self._store = store
        self._generator = generator
        self._retry = retry_policy or RetryPolicy.create()
        self._batch_policy = BatchFailurePolicy(batch_failure_policy or settings.batch_failure_policy)
        self._persist_placeholders = (
            settings.persist_placeholders if persist_placeholders is None else persist_placeholders
        )

    @classmethod
    def create(
        cls,
        store: ContentStore,
        generator: GenerationClient,
        batch_failure_policy: BatchFailurePolicy | str | None = None,
    ) -> "HoroscopeService":
        """Factory method to create HoroscopeService with settings defaults.

        Args:
            store: Artifact storage backend (required).
            generator: Content generation client (required).
            batch_failure_policy: Batch failure handling. If None, uses settings.

        Returns:
            Configured HoroscopeService instance
        """
        return cls(
            store=store,
            generator=generator,
            retry_policy=RetryPolicy.create(),
            batch_failure_policy=batch_failure_policy,
        )

    async def get_horoscope(self, sign: str | Sign | None, period: str | Period | None) -> Artifact:
        """Return the artifact for one key, generating it on a cache miss.

        Business logic:
        1. Validate sign and period
        2. Look the key up in the store; a hit is returned as is, except
           stored error placeholders, which count as a miss
        3. Generate under the retry policy and parse the result
        4. Insert (or overwrite a placeholder); if another request inserted
           first, return the stored row

        Args:
            sign: Zodiac sign (canonical value or English name)
            period: Forecast period (canonical value or English name)

        Returns:
            The cached or newly generated Artifact

        Raises:
            BadRequest: If sign or period is invalid
            RetriesExhausted: If generation stayed rate limited
            ParseError: If the generated text was malformed
            ProviderError: For other provider failures
            StoreUnavailable: If the store failed
        """
        request = GenerationRequest.parse(sign, period)

        cached = await self._store.lookup_one(request.sign, request.period)
        if cached is not None and not cached.is_placeholder:
            logger.debug("Cache hit for %s - %s", request.sign.value, request.period.value)
            return cached

        logger.info("Cache miss for %s - %s", request.sign.value, request.period.value)
        artifact = await self.generate_artifact(request.sign, request.period)

        if cached is not None:
            logger.info("Replacing stored placeholder for %s - %s", request.sign.value, request.period.value)
            await self._store.upsert_many([artifact])
            return artifact

        try:
            await self._store.insert_one(artifact)
        except StoreConflict:
            logger.info(
                "Concurrent insert won for %s - %s, returning stored artifact",
                request.sign.value,
                request.period.value,
            )
            stored = await self._store.lookup_one(request.sign, request.period)
            if stored is None or stored.is_placeholder:
                await self._store.upsert_many([artifact])
                return artifact
            return stored

        return artifact

    async def get_all_horoscopes(self, sign: str | Sign | None) -> list[Artifact]:
        """Return artifacts for every period of a sign, generating the missing ones.

        Business logic:
        1. Fetch everything stored for the sign
        2. Generate each missing period concurrently, each under its own retries
        3. Apply the batch failure policy to failed periods
        4. Upsert new artifacts in one call
        5. Return all periods in canonical order

        Args:
            sign: Zodiac sign (canonical value or English name)

        Returns:
            Artifacts ordered Yesterday, Today, Tomorrow, Week, Year

        Raises:
            BadRequest: If the sign is invalid
            HoroscopeError: Under the strict policy, the first period failure
            StoreUnavailable: If the store failed
        """
        sign = Sign.parse(sign)

        existing = await self._store.lookup_all_for_sign(sign)
        by_period = {artifact.period: artifact for artifact in existing}
        missing = [period for period in CANONICAL_PERIODS if period not in by_period]

        if missing:
            logger.info(
                "Missing periods for %s: %s",
                sign.value,
                ", ".join(period.value for period in missing),
            )
            new_artifacts = await self._generate_missing(sign, missing)

            to_store = [a for a in new_artifacts if self._persist_placeholders or not a.is_placeholder]
            if to_store:
                await self._store.upsert_many(to_store)

            for artifact in new_artifacts:
                by_period.setdefault(artifact.period, artifact)

        return [by_period[period] for period in CANONICAL_PERIODS if period in by_period]

    async def _generate_missing(self, sign: Sign, periods: list[Period]) -> list[Artifact]:
        results = await asyncio.gather(
            *(self.generate_artifact(sign, period) for period in periods),
            return_exceptions=True,
        )

        artifacts: list[Artifact] = []
        first_failure: HoroscopeError | None = None
        for period, result in zip(periods, results):
            if isinstance(result, HoroscopeError):
                if self._batch_policy is BatchFailurePolicy.STRICT:
                    first_failure = first_failure or result
                    continue
                logger.warning(
                    "Generation failed for %s - %s, using placeholder: %s",
                    sign.value,
                    period.value,
                    result,
                )
                artifacts.append(self._placeholder(sign, period, result))
            elif isinstance(result, BaseException):
                raise result
            else:
                artifacts.append(result)

        if first_failure is not None:
            raise first_failure
        return artifacts

    async def generate_artifact(self, sign: Sign, period: Period) -> Artifact:
        """Run one generation pipeline: generate under retry, then parse.

        Args:
            sign: Zodiac sign
            period: Forecast period

        Returns:
            A new, not yet persisted Artifact
        """
        raw = await self._retry.run(lambda: self._generator.generate(sign, period))
        return parse_artifact(raw, sign, period)

    @staticmethod
    def _placeholder(sign: Sign, period: Period, error: HoroscopeError) -> Artifact:
        return Artifact(
            sign=sign,
            period=period,
            summary=PLACEHOLDER_SUMMARY,
            details=error.message,
            generated_at=datetime.now(timezone.utc),
            error=error.message,
        )

    async def invalidate(self, sign: str | Sign | None, period: str | Period | None) -> bool:
        """Delete the stored artifact for a key so the next request regenerates it.

        Args:
            sign: Zodiac sign
            period: Forecast period

        Returns:
            True if a record was deleted, False if none existed
        """
        request = GenerationRequest.parse(sign, period)
        deleted = await self._store.delete_one(request.sign, request.period)
        if deleted:
            logger.info("Invalidated %s - %s", request.sign.value, request.period.value)
        return deleted

    async def health_report(self) -> dict[str, bool]:
        """Check each dependency.

        Returns:
            Dict with 'store' and 'generator' availability flags
        """
        return {
            "store": await self._store.health_check(),
            "generator": await self._generator.is_available(),
        }

    async def is_healthy(self) -> bool:
        """Check if the service is healthy.

        Returns:
            True if both the store and the generator are available
        """
        return all((await self.health_report()).values())

    @property
    def batch_failure_policy(self) -> BatchFailurePolicy:
        return self._batch_policy

    @property
    def store(self) -> ContentStore:
        """Get the underlying store (for testing)."""
        return self._store

    @property
    def generator(self) -> GenerationClient:
        """Get the underlying generation client (for testing)."""
        return self._generator
