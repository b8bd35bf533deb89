"""Turns raw provider output into an Artifact."""

import base64
from datetime import datetime, timezone

from horoscope_cache.entities import Artifact, Period, RawGenerationResult, Sign, Source
from horoscope_cache.exceptions import ParseError

SEPARATOR = "|||"


def split_text(text: str) -> tuple[str, str]:
    """Split model text into (summary, details) on the ``|||`` separator.

    Only the first separator splits; any later ones stay in the details.

    Raises:
        ParseError: If the separator is missing or either half is empty
    """
    summary, found, details = text.partition(SEPARATOR)
    if not found:
        raise ParseError("Generated text is missing the '|||' separator")

    summary, details = summary.strip(), details.strip()
    if not summary or not details:
        raise ParseError("Generated text has an empty summary or details section")
    return summary, details


def encode_image(image_bytes: bytes, mime_type: str = "image/png") -> str:
    """Encode image bytes as a base64 data URI."""
    return f"data:{mime_type};base64,{base64.b64encode(image_bytes).decode('ascii')}"


def parse_artifact(
    raw: RawGenerationResult,
    sign: Sign,
    period: Period,
    generated_at: datetime | None = None,
) -> Artifact:
    """Validate a raw generation result and build the artifact to persist.

    Args:
        raw: Unparsed provider output
        sign: Zodiac sign the content was generated for
        period: Forecast period the content was generated for
        generated_at: Creation timestamp. Defaults to now (UTC).

    Returns:
        The new Artifact

    Raises:
        ParseError: If the text does not split into a non-empty summary and details
    """
    summary, details = split_text(raw.text)

    # Citations without both fields are unusable as links
    sources = tuple(
        Source(uri=link.uri, title=link.title)
        for link in raw.grounding_links
        if link.uri and link.title
    )

    image_data = encode_image(raw.image_bytes, raw.image_mime_type) if raw.image_bytes else None

    return Artifact(
        sign=sign,
        period=period,
        summary=summary,
        details=details,
        image_data=image_data,
        sources=sources,
        generated_at=generated_at or datetime.now(timezone.utc),
    )
