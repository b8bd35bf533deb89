"""Domain entities for internal representation.

These are pure frozen dataclasses and enums used by services and
repositories. They are NOT used for API contracts - use DTOs from the
dto package for that.

Entities should have:
- No JSON serialization logic
- No Pydantic validation
- No external dependencies
"""

from .artifact import Artifact, GenerationRequest, GroundingLink, RawGenerationResult, Source
from .zodiac import CANONICAL_PERIODS, Period, Sign

__all__ = [
    "Artifact",
    "GenerationRequest",
    "GroundingLink",
    "RawGenerationResult",
    "Source",
    "Sign",
    "Period",
    "CANONICAL_PERIODS",
]
