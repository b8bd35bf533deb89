"""Content generation protocol.

Defines the interface for the external generative provider that produces
the horoscope text and illustration for one key.
"""

from typing import Protocol, runtime_checkable

from horoscope_cache.entities import Period, RawGenerationResult, Sign


@runtime_checkable
class GenerationClient(Protocol):
    """Protocol for generative content providers.

    Implementations must normalize provider failures into ``RateLimited``
    (retriable, with optional advised delay) and ``ProviderError``
    (everything else).
    """

    async def generate(self, sign: Sign, period: Period) -> RawGenerationResult:
        """Generate raw text and image content for a key.

        Args:
            sign: Zodiac sign
            period: Forecast period

        Returns:
            The unparsed generation result

        Raises:
            RateLimited: If the provider throttled the request
            ProviderError: For any other provider failure
        """
        ...

    async def is_available(self) -> bool:
        """Check if the provider is configured and usable.

        Returns:
            True if available, False otherwise
        """
        ...
