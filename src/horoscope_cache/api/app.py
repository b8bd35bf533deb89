"""FastAPI application exposing the horoscope cache service."""

from datetime import date
from typing import Any

from fastapi import FastAPI, Query, Request, Response, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from horoscope_cache.api.dependencies import HandlerDep, lifespan
from horoscope_cache.config import configure_logging, settings
from horoscope_cache.dto import (
    ErrorResponse,
    HealthCheckResponse,
    HoroscopeRequest,
    HoroscopeResponse,
    InvalidateResponse,
    SignHoroscopesRequest,
    ZodiacResponse,
)

configure_logging()

ERROR_RESPONSES: dict[int | str, dict[str, Any]] = {
    400: {"model": ErrorResponse},
    502: {"model": ErrorResponse},
    503: {"model": ErrorResponse},
}

app = FastAPI(
    title="Horoscope Cache API",
    description="Cache-aside horoscope generation using Redis and Google Gemini",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,  # type: ignore[arg-type]
    allow_origins=settings.cors_origin_list,
    allow_credentials="*" not in settings.cors_origin_list,
    allow_methods=["*"],
    allow_headers=["authorization", "x-client-info", "apikey", "content-type"],
)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Render every HTTP error as {"error": "..."}."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Render malformed request bodies as a 400 {"error": "..."}."""
    problems = "; ".join(
        f"{'.'.join(str(part) for part in err.get('loc', ()))}: {err.get('msg', 'invalid')}"
        for err in exc.errors()
    )
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": f"Invalid request: {problems}"},
    )


@app.get("/")
async def root() -> dict[str, Any]:
    """Root endpoint with API information."""
    return {
        "name": "Horoscope Cache API",
        "version": "0.1.0",
        "description": "Cache-aside horoscope generation using Redis and Google Gemini",
        "endpoints": {
            "horoscope": "/horoscope",
            "horoscopes": "/horoscopes",
            "zodiac": "/zodiac",
            "health": "/health",
            "docs": "/docs",
        },
    }


@app.get("/health", response_model=HealthCheckResponse, responses={503: {"model": ErrorResponse}})
async def health(handler: HandlerDep) -> HealthCheckResponse:
    """Health check endpoint."""
    return await handler.health_check()


# Pre-flight requests carry no body; answer them before any parsing or validation
@app.options("/horoscope")
@app.options("/horoscopes")
async def preflight() -> Response:
    """Answer CORS pre-flight negotiation with an empty success."""
    return Response(status_code=status.HTTP_200_OK)


@app.post("/horoscope", response_model=HoroscopeResponse, responses=ERROR_RESPONSES)
async def get_horoscope(request: HoroscopeRequest, handler: HandlerDep) -> HoroscopeResponse:
    """
    Get the horoscope for one sign and period, generating it if not cached.

    Args:
        request: Sign and period.

    Returns:
        The stored or newly generated horoscope.
    """
    return await handler.get_horoscope(request)


@app.post("/horoscopes", response_model=list[HoroscopeResponse], responses=ERROR_RESPONSES)
async def get_all_horoscopes(request: SignHoroscopesRequest, handler: HandlerDep) -> list[HoroscopeResponse]:
    """
    Get horoscopes for all five periods of a sign, generating the missing ones.

    Args:
        request: Sign.

    Returns:
        Horoscopes ordered Yesterday, Today, Tomorrow, Week, Year.
    """
    return await handler.get_all_horoscopes(request)


@app.delete("/horoscope/{sign}/{period}", response_model=InvalidateResponse, responses=ERROR_RESPONSES)
async def invalidate_horoscope(sign: str, period: str, handler: HandlerDep) -> InvalidateResponse:
    """Delete a stored horoscope so the next request regenerates it."""
    return await handler.invalidate(sign, period)


@app.get("/zodiac", response_model=ZodiacResponse, responses={400: {"model": ErrorResponse}})
async def zodiac(handler: HandlerDep, birth_date: date = Query(..., description="YYYY-MM-DD")) -> ZodiacResponse:
    """Get the zodiac sign for a birth date."""
    return await handler.zodiac_for_date(birth_date)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "horoscope_cache.api.app:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_reload,
    )
