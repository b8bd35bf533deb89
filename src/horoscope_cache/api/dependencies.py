"""Dependency injection configuration for FastAPI app.

Uses FastAPI's app.state pattern for storing service instances.

Pattern:
    - Services stored in app.state during lifespan
    - Dependency functions retrieve from request.app.state
    - Clean separation, no global mutable state
"""

import logging
from contextlib import asynccontextmanager
from typing import Annotated

from fastapi import Depends, FastAPI, Request

from horoscope_cache.config import settings
from horoscope_cache.handlers import HoroscopeHandler
from horoscope_cache.protocols import ContentStore
from horoscope_cache.repositories import (
    GeminiGenerationClient,
    InMemoryContentRepository,
    RedisContentRepository,
)
from horoscope_cache.services import HoroscopeService

logger = logging.getLogger(__name__)


def get_handler(request: Request) -> HoroscopeHandler:
    """Dependency injection for HoroscopeHandler from app.state.

    Args:
        request: FastAPI Request object

    Returns:
        The HoroscopeHandler instance from app.state

    Raises:
        RuntimeError: If handler is not initialized
    """
    handler = getattr(request.app.state, "horoscope_handler", None)
    if handler is None:
        raise RuntimeError("HoroscopeHandler not initialized. Check lifespan setup.")
    return handler


def build_store() -> ContentStore:
    """Create the content store selected by STORE_BACKEND."""
    if settings.store_backend == "memory":
        logger.warning("Using in-memory content store; horoscopes will not survive a restart")
        return InMemoryContentRepository()
    return RedisContentRepository.create()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for FastAPI app.

    Initializes all layers and stores in app.state:
    1. Store and generation client (data access) - created explicitly
    2. Service (business logic) - stored in app.state.horoscope_service
    3. Handler (HTTP endpoints) - stored in app.state.horoscope_handler

    Args:
        app: The FastAPI application instance

    Yields:
        None

    Cleanup:
        Closes the Redis pool and removes all services from app.state
    """
    store = build_store()
    generator = GeminiGenerationClient.create()

    horoscope_service = HoroscopeService.create(store=store, generator=generator)
    horoscope_handler = HoroscopeHandler(horoscope_service=horoscope_service)

    app.state.horoscope_service = horoscope_service
    app.state.horoscope_handler = horoscope_handler
    app.state.store = store
    app.state.generator = generator

    logger.info("Horoscope service initialized (store=%s)", settings.store_backend)
    logger.info("Batch failure policy: %s", horoscope_service.batch_failure_policy.value)
    logger.info("Image policy: %s", generator.image_policy.value)
    if not await store.health_check():
        logger.warning("Content store is not reachable at startup")

    yield

    if isinstance(store, RedisContentRepository):
        await store.close()

    del app.state.horoscope_handler
    del app.state.horoscope_service
    del app.state.store
    del app.state.generator
    logger.info("Horoscope service shut down")


# Type aliases for cleaner dependency injection
HandlerDep = Annotated[HoroscopeHandler, Depends(get_handler)]
