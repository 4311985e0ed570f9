"""
Event descriptor building (RawParameters -> EventDescriptor | BuildError).

The `dates` field is a rigid, undelimited fixed-width encoding:

    all-day : YYYYMMDD/YYYYMMDD
    timed   : YYYYMMDDTHHMMSS/YYYYMMDDTHHMMSS   (local time, no offset)

Components are sliced at fixed offsets instead of going through a general
date parser. Malformed input is an expected outcome and comes back as a
BuildError value; this module never raises for bad rows.
"""

from __future__ import annotations

import re
from datetime import date, datetime
from typing import Optional, Union

from agendafacil.model import (
    AllDay,
    BuildError,
    DateRange,
    ErrorKind,
    EventDescriptor,
    RawParameters,
    Timed,
)


TIME_SEPARATOR = "T"

_TIMED_RE = re.compile(r"\d{8}T\d{6}", re.ASCII)
_DAY_RE = re.compile(r"\d{8}", re.ASCII)


# ---------------------------------------------------------------------------
# Fixed-offset decomposition
# ---------------------------------------------------------------------------


def _parse_day(raw: str) -> date:
    """
    'YYYYMMDD' -> date. Raises ValueError for bad digits or out-of-range parts.
    """
    if not _DAY_RE.fullmatch(raw):
        raise ValueError(f"expected YYYYMMDD, got {raw!r}")
    # month in the string is the 1-based human month, which is what date() takes
    return date(int(raw[0:4]), int(raw[4:6]), int(raw[6:8]))


def _parse_instant(raw: str) -> datetime:
    """
    'YYYYMMDDTHHMMSS' -> naive local datetime.
    """
    if not _TIMED_RE.fullmatch(raw):
        raise ValueError(f"expected YYYYMMDDTHHMMSS, got {raw!r}")
    return datetime(
        int(raw[0:4]),
        int(raw[4:6]),
        int(raw[6:8]),
        int(raw[9:11]),
        int(raw[11:13]),
        int(raw[13:15]),
    )


def _invalid(side: str, raw: str, exc: ValueError) -> BuildError:
    return BuildError(
        kind=ErrorKind.INVALID_TIMESTAMP,
        message=f"invalid {side} timestamp: {exc}",
        field="dates",
        raw=raw,
        side=side,
    )


def parse_date_range(dates: str) -> Union[DateRange, BuildError]:
    """
    Parse the raw `dates` field into AllDay or Timed.
    """
    parts = dates.split("/")
    if len(parts) != 2:
        return BuildError(
            kind=ErrorKind.MALFORMED_DATE_RANGE,
            message=f"expected two '/'-separated parts, got {len(parts)}",
            field="dates",
            raw=dates,
        )

    start_raw, end_raw = parts

    if TIME_SEPARATOR in dates:
        try:
            start = _parse_instant(start_raw)
        except ValueError as exc:
            return _invalid("start", start_raw, exc)
        try:
            end = _parse_instant(end_raw)
        except ValueError as exc:
            return _invalid("end", end_raw, exc)
        return Timed(start=start, end=end)

    # the end half is the calendar's exclusive end date; the sink works it out
    try:
        return AllDay(start_date=_parse_day(start_raw))
    except ValueError as exc:
        return _invalid("start", start_raw, exc)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def build(params: RawParameters, row: Optional[int] = None) -> Union[EventDescriptor, BuildError]:
    """
    Validate extracted parameters and turn them into an EventDescriptor.

    Checks run in order and the first failure wins:
    1. text and dates must be non-empty
    2. dates must have exactly two '/'-separated parts
    3. each timestamp must decompose into a real calendar date/time

    `row` is only used to tag a returned BuildError.
    """
    missing = [name for name in ("text", "dates") if not getattr(params, name)]
    if missing:
        return BuildError(
            kind=ErrorKind.MISSING_REQUIRED_FIELD,
            message=f"could not extract {' and '.join(missing)} from the link",
            field=missing[0],
            row=row,
        )

    date_range = parse_date_range(params.dates)
    if isinstance(date_range, BuildError):
        return date_range.with_row(row)

    return EventDescriptor(
        title=params.text,
        range=date_range,
        description=params.details,
        location=params.location,
    )
