"""Google Gemini implementation of GenerationClient.

Two independent calls produce one horoscope:
- text: ``gemini-2.5-flash`` with the Google Search tool, so the response
  carries grounding metadata (web citations)
- image: ``gemini-2.5-flash-image`` with IMAGE response modality, returning
  the picture as an inline data part

Both run concurrently. Provider errors are normalized into ``RateLimited``
(with the advised retry delay when Gemini reports one) and ``ProviderError``.

Requires:
    pip install google-genai
    GEMINI_API_KEY set in the environment
"""

import asyncio
import logging
import re
from enum import Enum
from typing import Any

from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from horoscope_cache.config import settings
from horoscope_cache.entities import GroundingLink, Period, RawGenerationResult, Sign
from horoscope_cache.exceptions import HoroscopeError, ProviderError, RateLimited

logger = logging.getLogger(__name__)

TEXT_PROMPT = (
    "Создай подробный, проницательный и вдохновляющий гороскоп для знака зодиака {sign} "
    "на {period}, используя астрологические данные и текущие планетарные транзиты. "
    "Гороскоп должен быть хорошо структурирован и легко читаем. Добавь релевантные смайлики "
    "для атмосферы. Сначала предоставь краткую, интригующую сводку (2-3 предложения), а затем "
    "развернутое предсказание (минимум 4 абзаца), охватывающее ключевые сферы жизни: любовь, "
    "карьера, здоровье. Раздели краткое и подробное описание тремя вертикальными чертами '|||'."
)

IMAGE_PROMPT = (
    "Фэнтези-арт, символизирующий гороскоп для знака {sign} на {period}. "
    "Мистический, космический стиль, высокое разрешение. Например: \"Мистический баран "
    "с рогами из звезд, стоящий на космическом облаке, символизирующий Овна.\""
)

DEFAULT_IMAGE_MIME_TYPE = "image/png"

_DURATION_RE = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*(ms|s)?\s*$", re.IGNORECASE)
_RATE_LIMIT_RE = re.compile(r"\b429\b|RESOURCE_EXHAUSTED|RATE LIMIT", re.IGNORECASE)
_RETRY_HINT_RE = re.compile(
    r"retry(?:Delay)?[\"']?\s*(?:in|after|:)?\s*[\"']?(\d+(?:\.\d+)?)\s*"
    r"(ms|milliseconds?|s|sec|seconds?)\b",
    re.IGNORECASE,
)


class ImagePolicy(str, Enum):
    """What to do when the text call succeeds but the image call fails."""

    OPTIONAL = "optional"  # keep the text, return no image
    REQUIRED = "required"  # fail the whole generation


class GeminiGenerationClient:
    """Gemini implementation of the GenerationClient protocol.

    This class satisfies the GenerationClient protocol through structural
    typing - no explicit inheritance needed.

    Example:
        ```python
        client = GeminiGenerationClient.create()
        raw = await client.generate(Sign.TAURUS, Period.YEAR)
        print(raw.text.split("|||")[0])
        ```
    """

    def __init__(
        self,
        api_key: str | None = None,
        text_model: str | None = None,
        image_model: str | None = None,
        image_policy: ImagePolicy | str | None = None,
        timeout: float | None = None,
        client: genai.Client | None = None,
    ) -> None:
        """Initialize the Gemini generation client.

        Args:
            api_key: Gemini API key. Defaults to settings.gemini_api_key.
            text_model: Model for the grounded text call.
            image_model: Model for the image call.
            image_policy: Partial-success policy for image failures.
            timeout: Per-request timeout in seconds.
            client: Preconfigured google-genai client (skips lazy creation).
        """
        self._api_key = api_key or settings.gemini_api_key
        self._text_model = text_model or settings.gemini_text_model
        self._image_model = image_model or settings.gemini_image_model
        self._image_policy = ImagePolicy(image_policy or settings.image_policy)
        self._timeout = timeout or settings.gemini_timeout
        self._client = client

    @classmethod
    def create(
        cls,
        api_key: str | None = None,
        image_policy: ImagePolicy | str | None = None,
    ) -> "GeminiGenerationClient":
        """Factory method to create GeminiGenerationClient with defaults.

        Args:
            api_key: Gemini API key. If None, uses settings.
            image_policy: Image failure policy. If None, uses settings.

        Returns:
            Configured GeminiGenerationClient
        """
        return cls(api_key=api_key, image_policy=image_policy)

    @property
    def client(self) -> genai.Client:
        """Lazy-load the google-genai client.

        Raises:
            ProviderError: If no API key is configured
        """
        if self._client is None:
            if not self._api_key:
                raise ProviderError("GEMINI_API_KEY is not configured")
            self._client = genai.Client(
                api_key=self._api_key,
                http_options=types.HttpOptions(timeout=int(self._timeout * 1000)),
            )
        return self._client

    @property
    def image_policy(self) -> ImagePolicy:
        return self._image_policy

    async def generate(self, sign: Sign, period: Period) -> RawGenerationResult:
        """Generate horoscope text and image for a key.

        The two calls run concurrently and are both awaited to completion;
        a failure in one never cancels the other.

        Args:
            sign: Zodiac sign
            period: Forecast period

        Returns:
            RawGenerationResult with text, grounding links and image bytes

        Raises:
            RateLimited: If Gemini throttled the text call (or the image call
                under the required image policy)
            ProviderError: For any other failure
        """
        logger.info("Generating horoscope for %s - %s", sign.value, period.value)

        text_result, image_result = await asyncio.gather(
            self._generate_text(sign, period),
            self._generate_image(sign, period),
            return_exceptions=True,
        )

        for result in (text_result, image_result):
            if isinstance(result, BaseException) and not isinstance(result, Exception):
                raise result

        if isinstance(text_result, Exception):
            raise classify_provider_error(text_result) from text_result
        text, links = text_result

        image_bytes: bytes | None = None
        mime_type = DEFAULT_IMAGE_MIME_TYPE
        if isinstance(image_result, Exception):
            error = classify_provider_error(image_result)
            if self._image_policy is ImagePolicy.REQUIRED:
                raise error from image_result
            logger.warning(
                "Image generation failed for %s - %s, continuing without image: %s",
                sign.value,
                period.value,
                error,
            )
        else:
            image_bytes, mime_type = image_result
            if image_bytes is None and self._image_policy is ImagePolicy.REQUIRED:
                raise ProviderError(f"Gemini returned no image for {sign.value} - {period.value}")

        return RawGenerationResult(
            text=text,
            grounding_links=links,
            image_bytes=image_bytes,
            image_mime_type=mime_type,
        )

    async def _generate_text(self, sign: Sign, period: Period) -> tuple[str, tuple[GroundingLink, ...]]:
        response = await self.client.aio.models.generate_content(
            model=self._text_model,
            contents=TEXT_PROMPT.format(sign=sign.value, period=period.value),
            config=types.GenerateContentConfig(
                tools=[types.Tool(google_search=types.GoogleSearch())],
            ),
        )
        return response.text or "", _extract_grounding_links(response)

    async def _generate_image(self, sign: Sign, period: Period) -> tuple[bytes | None, str]:
        response = await self.client.aio.models.generate_content(
            model=self._image_model,
            contents=IMAGE_PROMPT.format(sign=sign.value, period=period.value),
            config=types.GenerateContentConfig(response_modalities=["IMAGE"]),
        )
        return _extract_inline_image(response)

    async def is_available(self) -> bool:
        """Check if the client is configured.

        Returns:
            True if an API key is set, False otherwise
        """
        return bool(self._api_key)


def _first_candidate(response: Any) -> Any:
    candidates = getattr(response, "candidates", None) or []
    return candidates[0] if candidates else None


def _extract_grounding_links(response: Any) -> tuple[GroundingLink, ...]:
    candidate = _first_candidate(response)
    metadata = getattr(candidate, "grounding_metadata", None)
    chunks = getattr(metadata, "grounding_chunks", None) or []

    links = []
    for chunk in chunks:
        web = getattr(chunk, "web", None)
        if web is None:
            continue
        links.append(GroundingLink(uri=getattr(web, "uri", None), title=getattr(web, "title", None)))
    return tuple(links)


def _extract_inline_image(response: Any) -> tuple[bytes | None, str]:
    candidate = _first_candidate(response)
    content = getattr(candidate, "content", None)
    for part in getattr(content, "parts", None) or []:
        inline = getattr(part, "inline_data", None)
        if inline is not None and inline.data:
            return inline.data, inline.mime_type or DEFAULT_IMAGE_MIME_TYPE
    return None, DEFAULT_IMAGE_MIME_TYPE


def classify_provider_error(exc: Exception) -> HoroscopeError:
    """Normalize a provider exception into RateLimited or ProviderError.

    Structured Gemini API errors are classified by HTTP code / status and
    their RetryInfo detail. Anything else falls back to scanning the error
    text for a rate-limit marker.

    Args:
        exc: Exception raised by a provider call

    Returns:
        The typed error to raise in its place
    """
    if isinstance(exc, HoroscopeError):
        return exc

    if isinstance(exc, genai_errors.APIError):
        if exc.code == 429 or exc.status == "RESOURCE_EXHAUSTED":
            advice = retry_delay_from_details(exc.details)
            if advice is None:
                advice = parse_retry_delay(str(exc))
            return RateLimited(f"Gemini rate limit exceeded: {exc.message}", advice_seconds=advice)
        return ProviderError(f"Gemini API error {exc.code}: {exc.message}")

    text = str(exc)
    if _RATE_LIMIT_RE.search(text):
        return RateLimited(f"Gemini rate limit exceeded: {text}", advice_seconds=parse_retry_delay(text))
    return ProviderError(f"Gemini request failed: {type(exc).__name__}: {text}")


def retry_delay_from_details(details: Any) -> float | None:
    """Find a ``retryDelay`` value anywhere in a Gemini error payload.

    Gemini reports it inside a ``google.rpc.RetryInfo`` entry of
    ``error.details``, formatted as a protobuf duration such as ``"17s"``.

    Returns:
        Delay in seconds, or None if the payload carries none
    """
    if isinstance(details, dict):
        if "retryDelay" in details:
            return parse_duration(details["retryDelay"])
        for value in details.values():
            found = retry_delay_from_details(value)
            if found is not None:
                return found
    elif isinstance(details, list):
        for item in details:
            found = retry_delay_from_details(item)
            if found is not None:
                return found
    return None


def parse_duration(value: Any) -> float | None:
    """Parse a protobuf-style duration ("17s", "1.5s", "500ms") into seconds."""
    if isinstance(value, (int, float)):
        return float(value)
    match = _DURATION_RE.match(str(value))
    if not match:
        return None
    amount = float(match.group(1))
    if (match.group(2) or "s").lower() == "ms":
        return amount / 1000
    return amount


def parse_retry_delay(text: str) -> float | None:
    """Extract an advised retry delay from free-text error messages.

    Recognizes forms such as "Please retry in 38.5s.", "retryDelay": "17s"
    and "retry after 5 seconds".

    Returns:
        Delay in seconds, or None if the text advises none
    """
    match = _RETRY_HINT_RE.search(text)
    if not match:
        return None
    amount = float(match.group(1))
    if match.group(2).lower().startswith("m"):
        return amount / 1000
    return amount
