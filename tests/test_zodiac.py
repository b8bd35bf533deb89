"""
Tests for sign and period parsing.
"""

from datetime import date

import pytest

from horoscope_cache.entities import CANONICAL_PERIODS, GenerationRequest, Period, Sign
from horoscope_cache.exceptions import BadRequest


def test_twelve_signs_five_periods():
    """The key space is fixed."""
    assert len(Sign) == 12
    assert len(Period) == 5


def test_canonical_period_order():
    """Canonical order is Yesterday, Today, Tomorrow, Week, Year."""
    assert [p.value for p in CANONICAL_PERIODS] == ["Вчера", "Сегодня", "Завтра", "Неделю", "Год"]


@pytest.mark.parametrize("raw", ["Телец", " Телец ", "TAURUS", "taurus", "телец", Sign.TAURUS])
def test_sign_parse_accepts_value_or_name(raw):
    """Signs parse from their value or English name."""
    assert Sign.parse(raw) is Sign.TAURUS


@pytest.mark.parametrize("raw", ["Год", "YEAR", "year"])
def test_period_parse(raw):
    """Periods parse from their value or English name."""
    assert Period.parse(raw) is Period.YEAR


@pytest.mark.parametrize("raw", [None, "", "   "])
def test_missing_values(raw):
    """Missing values are reported as required."""
    with pytest.raises(BadRequest, match="required"):
        Sign.parse(raw)


def test_unknown_value():
    """Unrecognized values are rejected."""
    with pytest.raises(BadRequest, match="Unknown period"):
        Period.parse("Месяц")


def test_generation_request_parse():
    """A request validates both halves of the key."""
    request = GenerationRequest.parse("Рыбы", "Сегодня")
    assert (request.sign, request.period) == (Sign.PISCES, Period.TODAY)

    with pytest.raises(BadRequest):
        GenerationRequest.parse("Рыбы", None)


@pytest.mark.parametrize(
    "birth_date, expected",
    [
        (date(2000, 1, 1), Sign.CAPRICORN),
        (date(2000, 1, 20), Sign.CAPRICORN),
        (date(2000, 1, 21), Sign.AQUARIUS),
        (date(2000, 2, 18), Sign.AQUARIUS),
        (date(2000, 2, 19), Sign.PISCES),
        (date(2000, 3, 20), Sign.PISCES),
        (date(2000, 3, 21), Sign.ARIES),
        (date(2000, 4, 20), Sign.TAURUS),
        (date(2000, 6, 21), Sign.GEMINI),
        (date(2000, 6, 22), Sign.CANCER),
        (date(2000, 8, 22), Sign.LEO),
        (date(2000, 9, 23), Sign.LIBRA),
        (date(2000, 10, 23), Sign.LIBRA),
        (date(2000, 10, 24), Sign.SCORPIO),
        (date(2000, 11, 23), Sign.SAGITTARIUS),
        (date(2000, 12, 21), Sign.SAGITTARIUS),
        (date(2000, 12, 22), Sign.CAPRICORN),
        (date(2000, 12, 31), Sign.CAPRICORN),
    ],
)
def test_sign_for_birth_date(birth_date, expected):
    """Boundary dates map onto the right sign."""
    assert Sign.for_birth_date(birth_date) is expected


def test_every_sign_has_emoji():
    """Each sign carries its glyph."""
    assert Sign.ARIES.emoji == "♈"
    assert all(sign.emoji for sign in Sign)
