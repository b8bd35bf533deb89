import logging
import os
from dataclasses import dataclass
from functools import lru_cache

import redis.asyncio as redis
from dotenv import load_dotenv

load_dotenv()


@dataclass(frozen=True)
class Settings:
    """Application settings loaded from environment variables."""

    # Storage
    store_backend: str = os.getenv("STORE_BACKEND", "redis")  # "redis" or "memory"
    redis_url: str = os.getenv("REDIS_URL", "redis://localhost:6379")
    redis_password: str | None = os.getenv("REDIS_PASSWORD")
    store_key_prefix: str = os.getenv("STORE_KEY_PREFIX", "horoscope")
    record_ttl: int = int(os.getenv("RECORD_TTL", "0"))  # 0 = records never expire

    # Gemini
    gemini_api_key: str | None = os.getenv("GEMINI_API_KEY")
    gemini_text_model: str = os.getenv("GEMINI_TEXT_MODEL", "gemini-2.5-flash")
    gemini_image_model: str = os.getenv("GEMINI_IMAGE_MODEL", "gemini-2.5-flash-image")
    gemini_timeout: float = float(os.getenv("GEMINI_TIMEOUT", "120"))
    image_policy: str = os.getenv("IMAGE_POLICY", "optional")  # "optional" or "required"

    # Retry
    retry_max_attempts: int = int(os.getenv("RETRY_MAX_ATTEMPTS", "3"))
    retry_base_delay: float = float(os.getenv("RETRY_BASE_DELAY", "2.0"))
    retry_margin: float = float(os.getenv("RETRY_MARGIN", "1.0"))
    retry_max_delay: float = float(os.getenv("RETRY_MAX_DELAY", "60.0"))

    # Batch reconciliation
    batch_failure_policy: str = os.getenv("BATCH_FAILURE_POLICY", "placeholder")  # or "strict"
    persist_placeholders: bool = os.getenv("PERSIST_PLACEHOLDERS", "false").lower() == "true"

    # API
    api_host: str = os.getenv("API_HOST", "0.0.0.0")
    api_port: int = int(os.getenv("API_PORT", "8000"))
    api_reload: bool = os.getenv("API_RELOAD", "true").lower() == "true"
    cors_origins: str = os.getenv("CORS_ORIGINS", "*")

    log_level: str = os.getenv("LOG_LEVEL", "INFO")

    @property
    def cors_origin_list(self) -> list[str]:
        """Split CORS_ORIGINS into a list of origins.

        Returns:
            Non-empty origins, stripped of whitespace
        """
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    def __post_init__(self) -> None:
        """Validate settings after initialization."""
        if self.store_backend not in ("redis", "memory"):
            raise ValueError(f"STORE_BACKEND must be 'redis' or 'memory', got {self.store_backend!r}")

        if self.record_ttl < 0:
            raise ValueError("RECORD_TTL must be >= 0 (0 disables expiry)")

        if self.image_policy not in ("optional", "required"):
            raise ValueError(f"IMAGE_POLICY must be 'optional' or 'required', got {self.image_policy!r}")

        if self.batch_failure_policy not in ("placeholder", "strict"):
            raise ValueError(
                f"BATCH_FAILURE_POLICY must be 'placeholder' or 'strict', "
                f"got {self.batch_failure_policy!r}"
            )

        if self.retry_max_attempts < 1:
            raise ValueError("RETRY_MAX_ATTEMPTS must be at least 1")

        if self.retry_base_delay < 0 or self.retry_margin < 0 or self.retry_max_delay < 0:
            raise ValueError("Retry delays must be non-negative")


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Global settings instance
settings = get_settings()


def get_redis_client() -> redis.Redis:
    """Create an asyncio Redis client instance."""
    return redis.from_url(
        settings.redis_url,
        password=settings.redis_password,
        decode_responses=True,
    )


def configure_logging(level: str | None = None) -> None:
    """Configure root logging once for the service process."""
    logging.basicConfig(
        level=(level or settings.log_level).upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
