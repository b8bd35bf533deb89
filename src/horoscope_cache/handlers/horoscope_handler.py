"""HTTP handlers for horoscope operations.

Handlers convert between DTOs (API contracts) and service calls.
They handle HTTP concerns like status codes, validation, and error handling.
"""

import logging
from datetime import date

from fastapi import HTTPException, status

from horoscope_cache.dto import (
    HealthCheckResponse,
    HoroscopeRequest,
    HoroscopeResponse,
    InvalidateResponse,
    SignHoroscopesRequest,
    SourceItem,
    ZodiacResponse,
)
from horoscope_cache.entities import Artifact, GenerationRequest, Sign
from horoscope_cache.exceptions import HoroscopeError
from horoscope_cache.services import HoroscopeService

logger = logging.getLogger(__name__)


class HoroscopeHandler:
    """HTTP handlers for horoscope operations.

    This handler delegates business logic to HoroscopeService
    and handles HTTP-specific concerns like:
    - Converting entities to DTOs
    - Mapping service errors to status codes
    - Turning unexpected failures into 500 responses

    Example:
        ```python
        handler = HoroscopeHandler(horoscope_service=service)

        @app.post("/horoscope", response_model=HoroscopeResponse)
        async def get_horoscope(request: HoroscopeRequest):
            return await handler.get_horoscope(request)
        ```
    """

    def __init__(self, horoscope_service: HoroscopeService) -> None:
        """Initialize the horoscope handler.

        Args:
            horoscope_service: The service for business logic (required).
        """
        self._service = horoscope_service

    async def get_horoscope(self, request: HoroscopeRequest) -> HoroscopeResponse:
        """Handle POST /horoscope requests.

        Args:
            request: The single-period request DTO

        Returns:
            HoroscopeResponse for the requested key

        Raises:
            HTTPException: With the status of the service error, or 500
        """
        try:
            artifact = await self._service.get_horoscope(request.sign, request.period)
            return to_response(artifact)

        except HoroscopeError as e:
            raise _http_error(e) from e
        except Exception as e:
            logger.exception("Unexpected error generating horoscope")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Failed to get horoscope: {e}",
            ) from e

    async def get_all_horoscopes(self, request: SignHoroscopesRequest) -> list[HoroscopeResponse]:
        """Handle POST /horoscopes requests.

        Args:
            request: The batch request DTO

        Returns:
            Five HoroscopeResponse items in canonical period order

        Raises:
            HTTPException: With the status of the service error, or 500
        """
        try:
            artifacts = await self._service.get_all_horoscopes(request.sign)
            return [to_response(artifact) for artifact in artifacts]

        except HoroscopeError as e:
            raise _http_error(e) from e
        except Exception as e:
            logger.exception("Unexpected error reconciling horoscopes")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Failed to get horoscopes: {e}",
            ) from e

    async def invalidate(self, sign: str, period: str) -> InvalidateResponse:
        """Handle DELETE /horoscope/{sign}/{period} requests.

        Args:
            sign: Zodiac sign from the path
            period: Forecast period from the path

        Returns:
            InvalidateResponse reporting whether a record was removed
        """
        try:
            request = GenerationRequest.parse(sign, period)
            deleted = await self._service.invalidate(request.sign, request.period)
            return InvalidateResponse(
                sign=request.sign.value,
                period=request.period.value,
                deleted=deleted,
            )

        except HoroscopeError as e:
            raise _http_error(e) from e
        except Exception as e:
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Failed to invalidate horoscope: {e}",
            ) from e

    async def zodiac_for_date(self, birth_date: date) -> ZodiacResponse:
        """Handle GET /zodiac requests.

        Args:
            birth_date: Birth date from the query string

        Returns:
            ZodiacResponse with the sign for that date
        """
        sign = Sign.for_birth_date(birth_date)
        return ZodiacResponse(sign=sign.value, sign_key=sign.name, emoji=sign.emoji)

    async def health_check(self) -> HealthCheckResponse:
        """Handle GET /health requests.

        Returns:
            HealthCheckResponse with per-dependency status

        Raises:
            HTTPException: 503 if any dependency is unavailable
        """
        report = await self._service.health_report()
        if not all(report.values()):
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail=f"Service unhealthy: store={report['store']}, generator={report['generator']}",
            )

        return HealthCheckResponse(
            status="healthy",
            store_healthy=report["store"],
            generator_healthy=report["generator"],
        )


def to_response(artifact: Artifact) -> HoroscopeResponse:
    """Convert an Artifact entity to its response DTO."""
    return HoroscopeResponse(
        sign=artifact.sign.value,
        period=artifact.period.value,
        summary=artifact.summary,
        details=artifact.details,
        image_data=artifact.image_data,
        sources=[SourceItem(uri=s.uri, title=s.title) for s in artifact.sources],
        generated_at=artifact.generated_at,
        error=artifact.error,
    )


def _http_error(error: HoroscopeError) -> HTTPException:
    if error.status_code >= 500:
        logger.error("Request failed: %s", error.message)
    return HTTPException(status_code=error.status_code, detail=error.message)
