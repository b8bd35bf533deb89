"""
Tests for the Gemini generation client and its error classification.
"""

import asyncio
from types import SimpleNamespace

import pytest
from google.genai import errors as genai_errors

from horoscope_cache.entities import GroundingLink, Period, Sign
from horoscope_cache.exceptions import ProviderError, RateLimited
from horoscope_cache.repositories import GeminiGenerationClient, ImagePolicy
from horoscope_cache.repositories.gemini_generation_client import (
    classify_provider_error,
    parse_duration,
    parse_retry_delay,
    retry_delay_from_details,
)

TEXT_MODEL = "text-model"
IMAGE_MODEL = "image-model"


def text_response(text="Сводка ||| Прогноз"):
    chunks = [
        SimpleNamespace(web=SimpleNamespace(uri="https://a.example", title="A")),
        SimpleNamespace(web=None),
        SimpleNamespace(web=SimpleNamespace(uri=None, title="untitled")),
    ]
    return SimpleNamespace(
        text=text,
        candidates=[SimpleNamespace(grounding_metadata=SimpleNamespace(grounding_chunks=chunks))],
    )


def image_response(data=b"jpeg-bytes", mime_type="image/jpeg"):
    parts = [
        SimpleNamespace(inline_data=None, text="here is your image"),
        SimpleNamespace(inline_data=SimpleNamespace(data=data, mime_type=mime_type)),
    ]
    return SimpleNamespace(candidates=[SimpleNamespace(content=SimpleNamespace(parts=parts))])


def rate_limit_error(retry_delay="17s"):
    return genai_errors.ClientError(
        429,
        {
            "error": {
                "code": 429,
                "message": "Resource has been exhausted (e.g. check quota).",
                "status": "RESOURCE_EXHAUSTED",
                "details": [
                    {"@type": "type.googleapis.com/google.rpc.QuotaFailure", "violations": []},
                    {"@type": "type.googleapis.com/google.rpc.RetryInfo", "retryDelay": retry_delay},
                ],
            }
        },
    )


class FakeModels:
    """Stands in for client.aio.models, keyed by model name."""

    def __init__(self, outcomes: dict) -> None:
        self.outcomes = outcomes
        self.calls: list[dict] = []
        self.finished: list[str] = []

    async def generate_content(self, model, contents, config=None):
        self.calls.append({"model": model, "contents": contents, "config": config})
        await asyncio.sleep(0)
        outcome = self.outcomes[model]
        self.finished.append(model)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


def make_client(outcomes: dict, image_policy=ImagePolicy.OPTIONAL) -> tuple[GeminiGenerationClient, FakeModels]:
    models = FakeModels(outcomes)
    fake_genai = SimpleNamespace(aio=SimpleNamespace(models=models))
    client = GeminiGenerationClient(
        api_key="test-key",
        text_model=TEXT_MODEL,
        image_model=IMAGE_MODEL,
        image_policy=image_policy,
        client=fake_genai,
    )
    return client, models


@pytest.mark.asyncio
async def test_generate_combines_text_and_image():
    """Both calls are issued and merged into one raw result."""
    client, models = make_client({TEXT_MODEL: text_response(), IMAGE_MODEL: image_response()})

    raw = await client.generate(Sign.TAURUS, Period.YEAR)

    assert raw.text == "Сводка ||| Прогноз"
    assert raw.grounding_links == (
        GroundingLink(uri="https://a.example", title="A"),
        GroundingLink(uri=None, title="untitled"),
    )
    assert raw.image_bytes == b"jpeg-bytes"
    assert raw.image_mime_type == "image/jpeg"
    assert {call["model"] for call in models.calls} == {TEXT_MODEL, IMAGE_MODEL}
    assert all("Телец" in call["contents"] and "Год" in call["contents"] for call in models.calls)


@pytest.mark.asyncio
async def test_image_failure_degrades_when_optional():
    """With the optional policy a failed image leaves the text intact."""
    client, models = make_client(
        {TEXT_MODEL: text_response(), IMAGE_MODEL: RuntimeError("image backend down")}
    )

    raw = await client.generate(Sign.LEO, Period.TODAY)

    assert raw.text
    assert raw.image_bytes is None


@pytest.mark.asyncio
async def test_image_failure_fails_when_required():
    """With the required policy a failed image fails the generation."""
    client, _ = make_client(
        {TEXT_MODEL: text_response(), IMAGE_MODEL: rate_limit_error("3s")},
        image_policy=ImagePolicy.REQUIRED,
    )

    with pytest.raises(RateLimited) as exc_info:
        await client.generate(Sign.LEO, Period.TODAY)
    assert exc_info.value.advice_seconds == 3.0


@pytest.mark.asyncio
async def test_missing_image_part_fails_when_required():
    """No inline image under the required policy is a provider error."""
    empty_image = SimpleNamespace(candidates=[SimpleNamespace(content=SimpleNamespace(parts=[]))])
    client, _ = make_client(
        {TEXT_MODEL: text_response(), IMAGE_MODEL: empty_image},
        image_policy=ImagePolicy.REQUIRED,
    )

    with pytest.raises(ProviderError):
        await client.generate(Sign.LEO, Period.TODAY)


@pytest.mark.asyncio
async def test_text_failure_does_not_cancel_image():
    """A failing text call still lets the image call finish before raising."""
    client, models = make_client({TEXT_MODEL: rate_limit_error(), IMAGE_MODEL: image_response()})

    with pytest.raises(RateLimited) as exc_info:
        await client.generate(Sign.VIRGO, Period.WEEK)

    assert exc_info.value.advice_seconds == 17.0
    assert sorted(models.finished) == sorted([TEXT_MODEL, IMAGE_MODEL])


@pytest.mark.asyncio
async def test_text_provider_error():
    """Non rate-limit text failures become ProviderError."""
    client, _ = make_client({TEXT_MODEL: ValueError("bad request"), IMAGE_MODEL: image_response()})

    with pytest.raises(ProviderError, match="bad request"):
        await client.generate(Sign.VIRGO, Period.WEEK)


@pytest.mark.asyncio
async def test_missing_api_key():
    """Without a key the client reports unavailable and refuses to build."""
    client = GeminiGenerationClient(api_key="", text_model=TEXT_MODEL, image_model=IMAGE_MODEL)
    client._api_key = None

    assert await client.is_available() is False
    with pytest.raises(ProviderError):
        _ = client.client


def test_classify_structured_rate_limit():
    """A 429 API error uses the RetryInfo delay."""
    error = classify_provider_error(rate_limit_error("42s"))
    assert isinstance(error, RateLimited)
    assert error.advice_seconds == 42.0


def test_classify_structured_other_error():
    """Other API errors are not retriable."""
    error = classify_provider_error(
        genai_errors.ClientError(400, {"error": {"code": 400, "message": "API key not valid", "status": "INVALID_ARGUMENT"}})
    )
    assert isinstance(error, ProviderError)
    assert "API key not valid" in error.message


def test_classify_text_fallback():
    """Unstructured errors are classified from their text."""
    error = classify_provider_error(RuntimeError("429 Too Many Requests. Please retry in 38.5s."))
    assert isinstance(error, RateLimited)
    assert error.advice_seconds == 38.5

    error = classify_provider_error(RuntimeError("RESOURCE_EXHAUSTED"))
    assert isinstance(error, RateLimited)
    assert error.advice_seconds is None

    assert isinstance(classify_provider_error(RuntimeError("connection reset")), ProviderError)


@pytest.mark.parametrize(
    "text",
    [
        "Prompt exceeds limit: 4290 tokens requested",
        "request id 1429-ab failed",
        "upstream error 42901",
    ],
)
def test_classify_ignores_429_inside_other_numbers(text):
    """Digits 429 embedded in a longer number are not a rate limit."""
    error = classify_provider_error(RuntimeError(text))
    assert isinstance(error, ProviderError)
    assert not isinstance(error, RateLimited)


def test_classify_passes_typed_errors_through():
    """Errors already in the taxonomy are returned unchanged."""
    original = ProviderError("already typed")
    assert classify_provider_error(original) is original


@pytest.mark.parametrize(
    "text, expected",
    [
        ("Please retry in 38.37814s.", 38.37814),
        ("'retryDelay': '17s'", 17.0),
        ('{"retryDelay": "5s"}', 5.0),
        ("retry after 5 seconds", 5.0),
        ("Retry in 500ms", 0.5),
        ("quota exceeded", None),
        ("retry in 5 minutes", None),
    ],
)
def test_parse_retry_delay(text, expected):
    """Advised delays are extracted from common message forms."""
    assert parse_retry_delay(text) == expected


@pytest.mark.parametrize(
    "value, expected",
    [("17s", 17.0), ("1.5s", 1.5), ("250ms", 0.25), ("3", 3.0), (4, 4.0), ("soon", None)],
)
def test_parse_duration(value, expected):
    """Protobuf-style durations convert to seconds."""
    assert parse_duration(value) == expected


def test_retry_delay_from_details_nested():
    """RetryInfo is found anywhere in the payload."""
    payload = {"error": {"details": [{"@type": "x"}, {"retryDelay": "9s"}]}}
    assert retry_delay_from_details(payload) == 9.0
    assert retry_delay_from_details({"error": {"details": []}}) is None
    assert retry_delay_from_details(None) is None
