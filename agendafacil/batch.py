"""
Batch driver: rows in, calendar events out, counts reported.

For each row:
    skip if it is not an event link
    extract -> build -> sink.create_event
    count as created or error

One bad row never stops the batch. There are no retries.
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional

from agendafacil.build import build
from agendafacil.extract import LINK_PREFIXES, extract, is_event_link
from agendafacil.model import BatchOutcome, BuildError, ErrorKind
from agendafacil.sinks import EventSink

logger = logging.getLogger(__name__)


def run_batch(
    source: Iterable[str],
    sink: EventSink,
    prefixes: Iterable[str] = LINK_PREFIXES,
    first_row: int = 1,
    outcome: Optional[BatchOutcome] = None,
) -> BatchOutcome:
    """
    Process every row of `source` in order and return the batch outcome.

    Rows are numbered from `first_row` (1 = first spreadsheet row).
    Pass `outcome` to keep the counts gathered so far if the source itself
    fails while being read; that error propagates to the caller.
    """
    prefixes = tuple(prefixes)
    if outcome is None:
        outcome = BatchOutcome()

    for row, value in enumerate(source, start=first_row):
        outcome.rows_seen += 1

        if not is_event_link(value, prefixes):
            logger.debug("Row %d skipped (empty or not an event link)", row)
            outcome.record_skipped()
            continue

        result = build(extract(value.strip()), row=row)

        if isinstance(result, BuildError):
            logger.warning("Row %d failed: %s", row, result.describe())
            outcome.record_error(result)
            continue

        try:
            sink.create_event(result)
        except Exception as exc:
            error = BuildError(
                kind=ErrorKind.EXTERNAL_CREATION_FAILURE,
                message=f"{type(exc).__name__}: {exc}",
                row=row,
            )
            logger.warning("Row %d failed: %s", row, error.describe())
            outcome.record_error(error)
            continue

        logger.info("Row %d: event created: %r", row, result.title)
        outcome.record_created(row, result)

    if outcome.rows_seen == 0:
        outcome.log.append("No URLs found.")

    logger.info(
        "Batch finished: %d created, %d errors, %d skipped",
        outcome.created_count,
        outcome.error_count,
        outcome.skipped_count,
    )
    return outcome


def format_summary(outcome: BatchOutcome) -> str:
    """
    End-of-batch message shown to the user.
    """
    return (
        "Processing finished.\n"
        f"Events created: {outcome.created_count}\n"
        f"Errors encountered: {outcome.error_count}"
    )
