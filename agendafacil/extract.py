"""
Parameter extraction (event-creation link -> RawParameters).

Targets exactly the query shape of Google Calendar "create event" links:

    https://www.google.com/calendar/render?action=TEMPLATE&text=...&dates=...

Important rules:
- Only text, dates, details, location and recur are kept
- Unknown keys are dropped, duplicate keys: last one wins
- Values: '+' becomes a space FIRST, then percent-decoding
"""

from __future__ import annotations

import logging
import re
from typing import Any, Iterable
from urllib.parse import unquote

from agendafacil.model import KNOWN_FIELDS, RawParameters

logger = logging.getLogger(__name__)


LINK_PREFIXES: tuple[str, ...] = ("https://www.google.com/calendar/",)


def is_event_link(value: Any, prefixes: Iterable[str] = LINK_PREFIXES) -> bool:
    """
    True if a cell value looks like an event-creation link worth parsing.
    """
    if not isinstance(value, str):
        return False
    candidate = value.strip()
    if not candidate:
        return False
    return any(candidate.startswith(p) for p in prefixes)


_BAD_ESCAPE_RE = re.compile(r"%(?![0-9A-Fa-f]{2})")


def _percent_decode(raw: str) -> str:
    """
    Strict percent-decoding: a stray '%' or an escape that is not valid
    UTF-8 raises ValueError.
    """
    if _BAD_ESCAPE_RE.search(raw):
        raise ValueError(f"malformed percent-escape in {raw!r}")
    return unquote(raw, errors="strict")


def _decode_key(raw: str) -> str:
    return _percent_decode(raw)


def _decode_value(raw: str) -> str:
    # legacy form encoding: '+' means space, '%2B' means a literal '+'
    return _percent_decode(raw.replace("+", " "))


def extract(url: str) -> RawParameters:
    """
    Extract the known query fields from one link.

    Never raises: a string without a query yields all-empty parameters,
    and a pair with a malformed escape (stray '%', invalid UTF-8) is skipped.
    """
    params = RawParameters()

    _, sep, query = url.partition("?")
    if not sep or not query:
        return params

    for pair in query.split("&"):
        if not pair:
            continue

        raw_key, _, raw_value = pair.partition("=")

        try:
            key = _decode_key(raw_key)
            value = _decode_value(raw_value) if raw_value else ""
        except ValueError:
            logger.debug("Dropping undecodable query pair: %r", pair)
            continue

        if key in KNOWN_FIELDS:
            setattr(params, key, value)

    return params
