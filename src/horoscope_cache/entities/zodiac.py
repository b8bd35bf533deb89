"""Zodiac signs and forecast periods, the two halves of the cache key."""

from bisect import bisect_right
from datetime import date
from enum import Enum

from horoscope_cache.exceptions import BadRequest


class _KeyEnum(str, Enum):
    """String enum parsed from its canonical value or its member name."""

    @classmethod
    def parse(cls, value: "str | _KeyEnum | None"):
        """Parse a raw request value into a member.

        Accepts the canonical (Russian) value or the English member name,
        case-insensitively. Surrounding whitespace is ignored.

        Raises:
            BadRequest: If the value is missing or unrecognized
        """
        label = cls._label()
        if isinstance(value, cls):
            return value
        if value is None or not str(value).strip():
            raise BadRequest(f"{label} is required")

        text = str(value).strip()
        for member in cls:
            if text == member.value or text.upper() == member.name:
                return member
        lowered = text.lower()
        for member in cls:
            if lowered == member.value.lower():
                return member
        raise BadRequest(f"Unknown {label.lower()}: {text!r}")

    @classmethod
    def _label(cls) -> str:
        return cls.__name__


class Sign(_KeyEnum):
    ARIES = "Овен"
    TAURUS = "Телец"
    GEMINI = "Близнецы"
    CANCER = "Рак"
    LEO = "Лев"
    VIRGO = "Дева"
    LIBRA = "Весы"
    SCORPIO = "Скорпион"
    SAGITTARIUS = "Стрелец"
    CAPRICORN = "Козерог"
    AQUARIUS = "Водолей"
    PISCES = "Рыбы"

    @property
    def emoji(self) -> str:
        return _SIGN_EMOJI[self]

    @classmethod
    def for_birth_date(cls, birth_date: date) -> "Sign":
        """Return the tropical zodiac sign for a birth date."""
        index = bisect_right(_SIGN_STARTS, (birth_date.month, birth_date.day)) - 1
        if index < 0:
            return cls.CAPRICORN
        return _SIGN_BY_START[index]


class Period(_KeyEnum):
    """Forecast horizon. Declaration order is the canonical response order."""

    YESTERDAY = "Вчера"
    TODAY = "Сегодня"
    TOMORROW = "Завтра"
    WEEK = "Неделю"
    YEAR = "Год"


_SIGN_EMOJI = {
    Sign.ARIES: "♈",
    Sign.TAURUS: "♉",
    Sign.GEMINI: "♊",
    Sign.CANCER: "♋",
    Sign.LEO: "♌",
    Sign.VIRGO: "♍",
    Sign.LIBRA: "♎",
    Sign.SCORPIO: "♏",
    Sign.SAGITTARIUS: "♐",
    Sign.CAPRICORN: "♑",
    Sign.AQUARIUS: "♒",
    Sign.PISCES: "♓",
}

# (month, day) on which each sign begins, sorted through the calendar year
_SIGN_BOUNDARIES = [
    ((1, 21), Sign.AQUARIUS),
    ((2, 19), Sign.PISCES),
    ((3, 21), Sign.ARIES),
    ((4, 20), Sign.TAURUS),
    ((5, 21), Sign.GEMINI),
    ((6, 22), Sign.CANCER),
    ((7, 23), Sign.LEO),
    ((8, 23), Sign.VIRGO),
    ((9, 23), Sign.LIBRA),
    ((10, 24), Sign.SCORPIO),
    ((11, 23), Sign.SAGITTARIUS),
    ((12, 22), Sign.CAPRICORN),
]
_SIGN_STARTS = [start for start, _ in _SIGN_BOUNDARIES]
_SIGN_BY_START = [sign for _, sign in _SIGN_BOUNDARIES]

CANONICAL_PERIODS: tuple[Period, ...] = tuple(Period)
