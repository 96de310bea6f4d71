# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""TTL normalization.

Callers may express an expiration in several ways; the storage driver only
understands "seconds to live".  Raw values are first coerced into one of the
:data:`TtlSpec` shapes at the cache boundary, then :func:`normalize` turns
the spec into a non-negative integer.

``0`` is a pass-through meaning "as long as the driver allows".
"""

from __future__ import annotations

import math
import re
import time
from dataclasses import dataclass
from datetime import datetime, timedelta, tzinfo

from dateutil import parser as dateutil_parser
from dateutil.relativedelta import relativedelta

from sealcache.core.exceptions import CacheTypeError, InvalidTtlError


@dataclass(frozen=True)
class Seconds:
    """An explicit relative duration in seconds."""

    value: int


@dataclass(frozen=True)
class EpochOrDuration:
    """An integer that is either a UNIX timestamp or a duration.

    Values greater than the current time are timestamps; everything else
    from ``0`` up to and including the current time is a duration.
    """

    value: int


@dataclass(frozen=True)
class DateString:
    """A relative phrase (``"+1 week"``) or an absolute date string."""

    value: str


@dataclass(frozen=True)
class Interval:
    """A :class:`~datetime.timedelta` or :class:`~dateutil.relativedelta.relativedelta`."""

    value: timedelta | relativedelta


TtlSpec = Seconds | EpochOrDuration | DateString | Interval | None

_SPEC_TYPES = (Seconds, EpochOrDuration, DateString, Interval)

_NUMERIC = re.compile(r"^\s*[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?\s*$")
_INTEGER = re.compile(r"^\s*[+-]?\d+\s*$")

# ---------------------------------------------------------------------------
# Relative date phrases ("+1 week", "3 days 4 hours", "2 hours ago")
# ---------------------------------------------------------------------------

_UNITS = {
    "sec": "seconds",
    "second": "seconds",
    "min": "minutes",
    "minute": "minutes",
    "hour": "hours",
    "day": "days",
    "week": "weeks",
    "fortnight": "fortnights",
    "month": "months",
    "year": "years",
}

_RELATIVE_TERM = re.compile(
    r"\s*,?\s*(?P<amount>[+-]?\s*\d+|next|last|an?)\s*"
    r"(?P<unit>secs?|seconds?|mins?|minutes?|hours?|days?|weeks?|fortnights?|months?|years?)\b",
    re.IGNORECASE,
)
_KEYWORD = re.compile(r"^\s*(?P<word>now|today|midnight|noon|tomorrow|yesterday)\b", re.IGNORECASE)
_AGO = re.compile(r"\s+ago\s*$", re.IGNORECASE)


def _unit_name(unit: str) -> str:
    unit = unit.lower()
    if unit.endswith("s") and unit[:-1] in _UNITS:
        unit = unit[:-1]
    return _UNITS[unit]


def _amount(raw: str) -> int:
    raw = raw.lower().replace(" ", "")
    if raw in ("next", "a", "an"):
        return 1
    if raw == "last":
        return -1
    return int(raw)


def _apply_keyword(word: str, anchor: datetime) -> datetime:
    midnight = anchor.replace(hour=0, minute=0, second=0, microsecond=0)
    word = word.lower()
    if word == "now":
        return anchor
    if word in ("today", "midnight"):
        return midnight
    if word == "noon":
        return midnight.replace(hour=12)
    if word == "tomorrow":
        return midnight + timedelta(days=1)
    return midnight - timedelta(days=1)


def _parse_relative(text: str, anchor: datetime) -> datetime | None:
    rest = text
    base = anchor
    matched = False

    keyword = _KEYWORD.match(rest)
    if keyword is not None:
        base = _apply_keyword(keyword.group("word"), anchor)
        rest = rest[keyword.end() :]
        matched = True

    ago = _AGO.search(rest)
    if ago is not None:
        rest = rest[: ago.start()]

    delta = relativedelta()
    pos = 0
    terms = 0
    while rest[pos:].strip():
        term = _RELATIVE_TERM.match(rest, pos)
        if term is None:
            return None
        unit = _unit_name(term.group("unit"))
        amount = _amount(term.group("amount"))
        try:
            if unit == "fortnights":
                delta += relativedelta(weeks=2 * amount)
            else:
                delta += relativedelta(**{unit: amount})
        except (ValueError, OverflowError):
            raise InvalidTtlError(f"The cache expiration {text!r} is out of range.") from None
        pos = term.end()
        terms += 1

    if ago is not None:
        if not terms:
            return None
        delta = -delta
    if not (matched or terms):
        return None
    try:
        return base + delta
    except (ValueError, OverflowError):
        raise InvalidTtlError(f"The cache expiration {text!r} is out of range.") from None


def _local_anchor(now: int, tz: tzinfo | None) -> datetime:
    if tz is not None:
        return datetime.fromtimestamp(now, tz)
    return datetime.fromtimestamp(now).astimezone()


def resolve_date_string(text: str, now: int, tz: tzinfo | None = None) -> int | None:
    """Resolve *text* to a UNIX timestamp anchored at *now*.

    Relative phrases are handled first; anything else goes to
    :func:`dateutil.parser.parse`.  Date-only strings resolve to midnight
    local time.  Returns ``None`` when the text cannot be parsed.

    Raises:
        InvalidTtlError: If a relative phrase lands outside the range of
            :class:`~datetime.datetime`.
    """
    text = text.strip()
    if not text or _INTEGER.match(text):
        return None
    anchor = _local_anchor(now, tz)

    resolved = _parse_relative(text, anchor)
    if resolved is None:
        midnight = anchor.replace(hour=0, minute=0, second=0, microsecond=0)
        try:
            resolved = dateutil_parser.parse(text, default=midnight)
        except (ValueError, OverflowError):
            return None
        if resolved.tzinfo is None:
            resolved = resolved.replace(tzinfo=anchor.tzinfo)
    try:
        return math.floor(resolved.timestamp())
    except (ValueError, OverflowError):
        return None


def interval_seconds(interval: timedelta | relativedelta, now: int, tz: tzinfo | None = None) -> int:
    """Seconds between *now* and *now* plus *interval* (may be negative).

    Raises:
        InvalidTtlError: If *now* plus *interval* is not a representable date.
    """
    if isinstance(interval, timedelta):
        return math.floor(interval.total_seconds())
    anchor = _local_anchor(now, tz)
    try:
        return math.floor(((anchor + interval) - anchor).total_seconds())
    except (ValueError, OverflowError):
        raise InvalidTtlError(f"The cache expiration interval {interval!r} is out of range.") from None


# ---------------------------------------------------------------------------
# Boundary coercion
# ---------------------------------------------------------------------------


def _recast_number(raw: object) -> int | None:
    """Non-strict recast of floats and numeric strings to ``int``."""
    if isinstance(raw, float):
        if not math.isfinite(raw):
            raise InvalidTtlError(f"The TTL must be a finite number. You supplied {raw}.")
        return int(raw)
    if isinstance(raw, str) and _NUMERIC.match(raw):
        if _INTEGER.match(raw):
            return int(raw.strip())
        return _recast_number(float(raw))
    return None


def coerce_ttl(raw: object, strict: bool = False) -> TtlSpec:
    """Turn a caller-supplied TTL into a :data:`TtlSpec`.

    Raises:
        CacheTypeError: If *raw* has none of the supported shapes.
    """
    if raw is None or isinstance(raw, _SPEC_TYPES):
        return raw
    if isinstance(raw, bool):
        raise CacheTypeError("The cache TTL argument must be an interval, integer, or a string. You supplied type bool.")
    if isinstance(raw, int):
        return EpochOrDuration(raw)
    if isinstance(raw, (timedelta, relativedelta)):
        return Interval(raw)
    if not strict:
        recast = _recast_number(raw)
        if recast is not None:
            return EpochOrDuration(recast)
    if isinstance(raw, str):
        return DateString(raw)
    raise CacheTypeError(
        "The cache TTL argument must be an interval, integer, or a string. "
        f"You supplied type {type(raw).__name__}."
    )


def coerce_default_ttl(raw: object, strict: bool = False, now: int | None = None) -> int:
    """Validate a new default TTL, returning it in seconds."""
    if now is None:
        now = int(time.time())
    seconds: int | None = None
    if isinstance(raw, bool):
        seconds = None
    elif isinstance(raw, int):
        seconds = raw
    elif isinstance(raw, (timedelta, relativedelta)):
        seconds = interval_seconds(raw, now)
    elif not strict:
        seconds = _recast_number(raw)
    if seconds is None:
        raise CacheTypeError(
            "The default cache TTL must be an interval or integer. "
            f"You supplied type {type(raw).__name__}."
        )
    if seconds < 0:
        raise InvalidTtlError(f"The default TTL can not be a negative number. You supplied {seconds}.")
    return seconds


# ---------------------------------------------------------------------------
# Normalization
# ---------------------------------------------------------------------------


def normalize(spec: TtlSpec, now: int, default_ttl: int, tz: tzinfo | None = None) -> int:
    """Resolve *spec* to seconds-to-live relative to *now*.

    Args:
        spec: The coerced TTL.
        now: Current UNIX time in seconds.
        default_ttl: Returned when *spec* is ``None``.
        tz: Timezone for date strings and calendar intervals; defaults to the
            local timezone.

    Raises:
        InvalidTtlError: If the TTL is negative, resolves to the past, or is
            an unparseable string.
        CacheTypeError: If *spec* is not a :data:`TtlSpec`.
    """
    if spec is None:
        return default_ttl

    if isinstance(spec, EpochOrDuration):
        n = spec.value
        if n > now:
            return n - now
        if n < 0:
            raise InvalidTtlError(f"The TTL can not be a negative number. You supplied {n}.")
        return n

    if isinstance(spec, Seconds):
        if spec.value < 0:
            raise InvalidTtlError(f"The TTL can not be a negative number. You supplied {spec.value}.")
        return spec.value

    if isinstance(spec, DateString):
        resolved = resolve_date_string(spec.value, now, tz)
        if resolved is None:
            raise InvalidTtlError(
                "The cache expiration must be a TTL in seconds, seconds from UNIX epoch, "
                f"an interval, or an expiration date string. You supplied: {spec.value!r}"
            )
        if resolved <= now:
            raise InvalidTtlError(
                f"The cache expiration can not be in the past. You supplied {spec.value!r}."
            )
        return resolved - now

    if isinstance(spec, Interval):
        seconds = interval_seconds(spec.value, now, tz)
        if seconds < 0:
            raise InvalidTtlError("The cache expiration can not be in the past.")
        return seconds

    raise CacheTypeError(f"Unsupported TTL specification: {type(spec).__name__}")
