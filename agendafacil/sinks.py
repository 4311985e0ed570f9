"""
Event sinks: the "create event" side of a batch.

A sink receives validated EventDescriptors one at a time. Raising from
create_event() means the calendar rejected the event; the batch driver
counts that row as an ExternalCreationFailure and moves on.

IcsCalendarSink writes an iCalendar (.ics) file that can be imported into:
- Google Calendar
- Outlook
- Apple Calendar
"""

from __future__ import annotations

import hashlib
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Optional, Protocol

from agendafacil.model import AllDay, EventDescriptor, Timed


class EventSink(Protocol):
    def create_event(self, descriptor: EventDescriptor) -> None: ...


class QuotaExceededError(RuntimeError):
    pass


def _ics_escape(text: str) -> str:
    """
    Escape text for ICS fields (very small subset, sufficient for our use).
    """
    return (
        text.replace("\\", "\\\\").replace("\r\n", "\\n").replace("\n", "\\n").replace(";", "\\;").replace(",", "\\,")
    )


def _event_uid(descriptor: EventDescriptor, dtstart: str, seq: int) -> str:
    # seq keeps otherwise identical rows distinct
    key = f"{seq}|{descriptor.title}|{dtstart}|{descriptor.location}|{descriptor.description}"
    digest = hashlib.sha1(key.encode("utf-8")).hexdigest()
    return f"{digest[:16]}-{seq}-{dtstart}@agendafacil"


class IcsCalendarSink:
    """
    Collect events in memory and write them as one .ics file on save().

    All-day events get an exclusive DTEND of the following day.
    Timed events are written as floating local times (no TZID).
    """

    def __init__(self, out_path: str | Path, max_events: Optional[int] = None) -> None:
        self.out_path = Path(out_path)
        self.max_events = max_events
        self._vevents: list[list[str]] = []

    def __len__(self) -> int:
        return len(self._vevents)

    def create_event(self, descriptor: EventDescriptor) -> None:
        if self.max_events is not None and len(self._vevents) >= self.max_events:
            raise QuotaExceededError(f"calendar quota of {self.max_events} events reached")

        rng = descriptor.range
        if isinstance(rng, AllDay):
            dtstart = rng.start_date.strftime("%Y%m%d")
            dtend = (rng.start_date + timedelta(days=1)).strftime("%Y%m%d")
            start_line = f"DTSTART;VALUE=DATE:{dtstart}"
            end_line = f"DTEND;VALUE=DATE:{dtend}"
        elif isinstance(rng, Timed):
            if rng.end < rng.start:
                raise ValueError(f"event ends before it starts: {rng.start} > {rng.end}")
            dtstart = rng.start.strftime("%Y%m%dT%H%M%S")
            start_line = f"DTSTART:{dtstart}"
            end_line = f"DTEND:{rng.end.strftime('%Y%m%dT%H%M%S')}"
        else:
            raise TypeError(f"unsupported date range: {rng!r}")

        lines: list[str] = []
        lines.append("BEGIN:VEVENT")
        lines.append(f"UID:{_ics_escape(_event_uid(descriptor, dtstart, len(self._vevents)))}")
        dtstamp = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%SZ")
        lines.append(f"DTSTAMP:{dtstamp}")
        lines.append(start_line)
        lines.append(end_line)
        lines.append(f"SUMMARY:{_ics_escape(descriptor.title)}")
        if descriptor.location:
            lines.append(f"LOCATION:{_ics_escape(descriptor.location)}")
        if descriptor.description:
            lines.append(f"DESCRIPTION:{_ics_escape(descriptor.description)}")
        lines.append("END:VEVENT")

        self._vevents.append(lines)

    def save(self) -> int:
        """
        Write the calendar file. Returns number of exported events.
        """
        self.out_path.parent.mkdir(parents=True, exist_ok=True)

        lines: list[str] = []
        lines.append("BEGIN:VCALENDAR")
        lines.append("VERSION:2.0")
        lines.append("PRODID:-//Agenda Facil//EN")
        lines.append("CALSCALE:GREGORIAN")
        for vevent in self._vevents:
            lines.extend(vevent)
        lines.append("END:VCALENDAR")

        # ICS standard uses CRLF
        self.out_path.write_text("\r\n".join(lines) + "\r\n", encoding="utf-8")
        return len(self._vevents)


class MemorySink:
    """
    Keeps created descriptors in a list. Used for dry runs and tests.
    """

    def __init__(self) -> None:
        self.events: list[EventDescriptor] = []

    def create_event(self, descriptor: EventDescriptor) -> None:
        self.events.append(descriptor)
