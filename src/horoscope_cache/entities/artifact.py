"""Horoscope artifact domain entities."""

from dataclasses import dataclass, field
from datetime import datetime

from horoscope_cache.entities.zodiac import Period, Sign


@dataclass(frozen=True)
class Source:
    """A web citation backing the generated text."""

    uri: str
    title: str


@dataclass(frozen=True)
class Artifact:
    """Domain entity for the cached content of one (sign, period) key.

    Once persisted an artifact is never modified; a cache hit always
    returns it as stored.

    Attributes:
        sign: Zodiac sign (first half of the key)
        period: Forecast period (second half of the key)
        summary: Short teaser text
        details: Long-form forecast
        image_data: Image as a base64 data URI, or None when no image was produced
        sources: Citation sources from grounding metadata
        generated_at: When the content was generated (UTC)
        error: Failure message; set only on batch error placeholders
    """

    sign: Sign
    period: Period
    summary: str
    details: str
    generated_at: datetime
    image_data: str | None = None
    sources: tuple[Source, ...] = field(default_factory=tuple)
    error: str | None = None

    @property
    def key(self) -> tuple[Sign, Period]:
        return (self.sign, self.period)

    @property
    def is_placeholder(self) -> bool:
        """True when this artifact stands in for a failed generation."""
        return self.error is not None


@dataclass(frozen=True)
class GroundingLink:
    """Raw grounding chunk as returned by the provider; either field may be missing."""

    uri: str | None = None
    title: str | None = None


@dataclass(frozen=True)
class RawGenerationResult:
    """Unparsed output of one text + image generation round.

    Attributes:
        text: Raw model text, expected to contain the summary|||details separator
        grounding_links: Web grounding chunks attached to the text response
        image_bytes: Inline image payload, or None if no image part was returned
        image_mime_type: MIME type of the image payload
    """

    text: str
    grounding_links: tuple[GroundingLink, ...] = field(default_factory=tuple)
    image_bytes: bytes | None = None
    image_mime_type: str = "image/png"


@dataclass(frozen=True)
class GenerationRequest:
    """A validated (sign, period) pair."""

    sign: Sign
    period: Period

    @classmethod
    def parse(cls, sign: "str | Sign | None", period: "str | Period | None") -> "GenerationRequest":
        """Validate raw request values.

        Raises:
            BadRequest: If either value is missing or unrecognized
        """
        return cls(sign=Sign.parse(sign), period=Period.parse(period))
