"""Error taxonomy for the horoscope service.

Every failure the service can produce is a ``HoroscopeError``. Each subclass
carries the HTTP status the handler layer responds with, so the mapping lives
next to the error rather than in every endpoint.

Recoverable conditions (``RateLimited``, ``StoreConflict``) are absorbed by
the component that can act on them and are not expected at the HTTP boundary.
"""


class HoroscopeError(Exception):
    """Base class for all service errors."""

    status_code: int = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class BadRequest(HoroscopeError):
    """Missing or unrecognized sign/period."""

    status_code = 400


class RateLimited(HoroscopeError):
    """The content provider throttled the request.

    Attributes:
        advice_seconds: Provider-advised delay before retrying, if any
    """

    status_code = 429

    def __init__(self, message: str, advice_seconds: float | None = None) -> None:
        super().__init__(message)
        self.advice_seconds = advice_seconds


class ProviderError(HoroscopeError):
    """Non-retriable content provider failure."""

    status_code = 502


class RetriesExhausted(HoroscopeError):
    """The retry budget was consumed without a successful attempt.

    Attributes:
        last_error: The error raised by the final attempt
        attempts: Number of attempts made
    """

    status_code = 503

    def __init__(self, last_error: Exception, attempts: int) -> None:
        super().__init__(f"Generation failed after {attempts} attempts: {last_error}")
        self.last_error = last_error
        self.attempts = attempts


class ParseError(HoroscopeError):
    """Provider output did not have the expected summary|||details shape."""

    status_code = 502


class StoreConflict(HoroscopeError):
    """An artifact already exists for the key being inserted."""

    status_code = 409


class StoreUnavailable(HoroscopeError):
    """The content store could not be reached or failed the operation."""

    status_code = 503
