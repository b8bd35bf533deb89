"""
Shared fixtures and fakes for the horoscope cache tests.
"""

import asyncio

import pytest
from fastapi.testclient import TestClient

from horoscope_cache.api.app import app
from horoscope_cache.api.dependencies import get_handler
from horoscope_cache.entities import GroundingLink, Period, RawGenerationResult, Sign
from horoscope_cache.handlers import HoroscopeHandler
from horoscope_cache.repositories import InMemoryContentRepository
from horoscope_cache.services import HoroscopeService, RetryPolicy

GENERATED_TEXT = "Звёзды благоволят вам. ✨ ||| Любовь: гармония.\n\nКарьера: рост.\n\nЗдоровье: баланс."


class FakeGenerationClient:
    """GenerationClient double that records calls and can fail on demand."""

    def __init__(
        self,
        text: str = GENERATED_TEXT,
        errors: dict[Period, list[Exception]] | None = None,
        delays: dict[Period, float] | None = None,
    ) -> None:
        self.text = text
        self.errors = {period: list(queue) for period, queue in (errors or {}).items()}
        self.delays = delays or {}
        self.calls: list[tuple[Sign, Period]] = []
        self.completed: list[Period] = []

    async def generate(self, sign: Sign, period: Period) -> RawGenerationResult:
        self.calls.append((sign, period))
        await asyncio.sleep(self.delays.get(period, 0))

        queued = self.errors.get(period)
        if queued:
            raise queued.pop(0)

        self.completed.append(period)
        return RawGenerationResult(
            text=self.text,
            grounding_links=(
                GroundingLink(uri="https://astro.example/transits", title="Транзиты"),
                GroundingLink(uri="https://astro.example/no-title", title=None),
            ),
            image_bytes=b"\x89PNG fake",
        )

    async def is_available(self) -> bool:
        return True


class SpyStore(InMemoryContentRepository):
    """In-memory store that records every call made to it."""

    def __init__(self) -> None:
        super().__init__()
        self.calls: list[str] = []

    async def lookup_one(self, sign, period):
        self.calls.append("lookup_one")
        return await super().lookup_one(sign, period)

    async def lookup_all_for_sign(self, sign):
        self.calls.append("lookup_all_for_sign")
        return await super().lookup_all_for_sign(sign)

    async def insert_one(self, artifact):
        self.calls.append("insert_one")
        await super().insert_one(artifact)

    async def upsert_many(self, artifacts):
        self.calls.append("upsert_many")
        await super().upsert_many(artifacts)


async def no_sleep(_: float) -> None:
    return None


@pytest.fixture
def store():
    """Create an empty spy store."""
    return SpyStore()


@pytest.fixture
def generator():
    """Create a generation client that always succeeds."""
    return FakeGenerationClient()


@pytest.fixture
def retry_policy():
    """Create a retry policy that never actually sleeps."""
    return RetryPolicy(max_attempts=3, base_delay=0.0, margin=0.0, sleep=no_sleep)


@pytest.fixture
def service(store, generator, retry_policy):
    """Create a service over the fake store and generator."""
    return HoroscopeService(
        store=store,
        generator=generator,
        retry_policy=retry_policy,
        batch_failure_policy="placeholder",
        persist_placeholders=False,
    )


@pytest.fixture
def client(service):
    """Create a test client wired to the fake-backed service."""
    app.dependency_overrides[get_handler] = lambda: HoroscopeHandler(horoscope_service=service)
    yield TestClient(app)
    app.dependency_overrides.clear()
