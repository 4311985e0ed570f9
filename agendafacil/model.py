"""
Central data model definitions used across the project.

This module defines the canonical structure of extracted link parameters,
event descriptors, row errors and batch results so that:
- the extractor, builder, sinks and CLI share the same field names
- malformed rows are values (BuildError), not exceptions
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date, datetime
from enum import Enum
from typing import Optional, List, Union


KNOWN_FIELDS = ("text", "dates", "details", "location", "recur")


@dataclass
class RawParameters:
    """
    The five query fields of an event-creation link.

    Missing fields are empty strings, never None.
    """

    text: str = ""
    dates: str = ""
    details: str = ""
    location: str = ""
    recur: str = ""

    def as_dict(self) -> dict[str, str]:
        return {name: getattr(self, name) for name in KNOWN_FIELDS}


@dataclass(frozen=True)
class AllDay:
    """
    All-day range. Only the start date is kept; the calendar supplies the span.
    """

    start_date: date


@dataclass(frozen=True)
class Timed:
    """
    Timed range with naive local start/end instants.
    """

    start: datetime
    end: datetime


DateRange = Union[AllDay, Timed]


@dataclass(frozen=True)
class EventDescriptor:
    title: str
    range: DateRange
    description: str = ""
    location: str = ""

    @property
    def is_all_day(self) -> bool:
        return isinstance(self.range, AllDay)


class ErrorKind(str, Enum):
    MISSING_REQUIRED_FIELD = "MissingRequiredField"
    MALFORMED_DATE_RANGE = "MalformedDateRange"
    INVALID_TIMESTAMP = "InvalidTimestamp"
    EXTERNAL_CREATION_FAILURE = "ExternalCreationFailure"


@dataclass(frozen=True)
class BuildError:
    """
    Why one row could not become a calendar event.

    `raw` holds the offending substring, `side` is "start" or "end" for
    timestamp errors, `row` is whatever identifier the caller passed in.
    """

    kind: ErrorKind
    message: str
    field: Optional[str] = None
    raw: Optional[str] = None
    side: Optional[str] = None
    row: Optional[int] = None

    def with_row(self, row: Optional[int]) -> BuildError:
        return replace(self, row=row)

    def describe(self) -> str:
        where = f"row {self.row}: " if self.row is not None else ""
        detail = self.message
        if self.raw is not None:
            detail += f" ({self.raw!r})"
        return f"{where}{self.kind.value}: {detail}"


@dataclass
class BatchOutcome:
    """
    Counters and log of one batch run. Never persisted.
    """

    created_count: int = 0
    error_count: int = 0
    skipped_count: int = 0
    rows_seen: int = 0
    log: List[str] = field(default_factory=list)

    def record_created(self, row: int, descriptor: EventDescriptor) -> None:
        self.created_count += 1
        if isinstance(descriptor.range, AllDay):
            when = descriptor.range.start_date.isoformat()
            self.log.append(f"row {row}: all-day event created: {descriptor.title!r} on {when}")
        else:
            when = descriptor.range.start.isoformat(sep=" ")
            self.log.append(f"row {row}: timed event created: {descriptor.title!r} at {when}")

    def record_error(self, error: BuildError) -> None:
        self.error_count += 1
        self.log.append(error.describe())

    def record_skipped(self) -> None:
        self.skipped_count += 1
