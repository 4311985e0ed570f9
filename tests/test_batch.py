"""
Tests for the batch driver.

Batch contract:
- non-link rows are skipped, not counted as errors
- every failure (bad link or rejected by the calendar) is one error
- one bad row never stops the rows after it
"""

import unittest
from datetime import date

from agendafacil.batch import format_summary, run_batch
from agendafacil.model import AllDay, BatchOutcome, EventDescriptor
from agendafacil.sinks import MemorySink

BASE = "https://www.google.com/calendar/render?action=TEMPLATE"
GOOD_TIMED = BASE + "&text=Standup&dates=20250101T090000/20250101T100000"
GOOD_ALL_DAY = BASE + "&text=Holiday&dates=20250101/20250102"
BAD = BASE + "&text=Broken&dates=bad-format"


class FailingSink:
    """
    Rejects events whose title is in `reject`, records the rest.
    """

    def __init__(self, reject: set[str]) -> None:
        self.reject = reject
        self.events: list[EventDescriptor] = []

    def create_event(self, descriptor: EventDescriptor) -> None:
        if descriptor.title in self.reject:
            raise PermissionError("calendar is read-only")
        self.events.append(descriptor)


class TestRunBatch(unittest.TestCase):
    def test_bad_row_does_not_stop_batch(self) -> None:
        sink = MemorySink()
        outcome = run_batch([GOOD_TIMED, BAD, GOOD_ALL_DAY], sink)

        self.assertEqual(outcome.created_count, 2)
        self.assertEqual(outcome.error_count, 1)
        self.assertEqual([e.title for e in sink.events], ["Standup", "Holiday"])
        self.assertEqual(sink.events[1].range, AllDay(start_date=date(2025, 1, 1)))
        self.assertTrue(any("row 2" in line and "MalformedDateRange" in line for line in outcome.log))

    def test_non_links_are_skipped(self) -> None:
        sink = MemorySink()
        outcome = run_batch(["Links", "", "   ", "https://example.com/?text=x", GOOD_TIMED], sink)

        self.assertEqual(outcome.created_count, 1)
        self.assertEqual(outcome.error_count, 0)
        self.assertEqual(outcome.skipped_count, 4)
        self.assertEqual(outcome.rows_seen, 5)

    def test_sink_failure_is_counted_and_batch_continues(self) -> None:
        sink = FailingSink(reject={"Standup"})
        outcome = run_batch([GOOD_TIMED, GOOD_ALL_DAY], sink)

        self.assertEqual(outcome.created_count, 1)
        self.assertEqual(outcome.error_count, 1)
        self.assertEqual([e.title for e in sink.events], ["Holiday"])
        self.assertTrue(any("ExternalCreationFailure" in line and "read-only" in line for line in outcome.log))

    def test_missing_title_is_error(self) -> None:
        outcome = run_batch([BASE + "&dates=20250101/20250102"], MemorySink())
        self.assertEqual(outcome.error_count, 1)
        self.assertIn("MissingRequiredField", outcome.log[0])

    def test_row_numbers_start_at_first_row(self) -> None:
        outcome = run_batch(["header", BAD], MemorySink(), first_row=5)
        self.assertIn("row 6", outcome.log[0])

    def test_custom_prefix(self) -> None:
        url = "https://calendar.google.com/calendar/render?text=A&dates=20250101/20250102"
        sink = MemorySink()

        outcome = run_batch([url], sink)
        self.assertEqual(outcome.skipped_count, 1)

        outcome = run_batch([url], sink, prefixes=["https://calendar.google.com/calendar/"])
        self.assertEqual(outcome.created_count, 1)

    def test_empty_source(self) -> None:
        outcome = run_batch([], MemorySink())
        self.assertEqual((outcome.created_count, outcome.error_count), (0, 0))
        self.assertEqual(outcome.log, ["No URLs found."])

    def test_source_is_consumed_lazily_in_order(self) -> None:
        seen: list[str] = []

        def rows():
            for value in (GOOD_TIMED, BAD, GOOD_ALL_DAY):
                seen.append(value)
                yield value

        outcome = run_batch(rows(), MemorySink())
        self.assertEqual(seen, [GOOD_TIMED, BAD, GOOD_ALL_DAY])
        self.assertEqual(outcome.created_count, 2)

    def test_counts_survive_a_failing_source(self) -> None:
        def rows():
            yield GOOD_TIMED
            yield BAD
            raise OSError("connection reset")

        outcome = BatchOutcome()
        with self.assertRaises(OSError):
            run_batch(rows(), MemorySink(), outcome=outcome)

        self.assertEqual(outcome.rows_seen, 2)
        self.assertEqual((outcome.created_count, outcome.error_count), (1, 1))

    def test_format_summary(self) -> None:
        outcome = run_batch([GOOD_TIMED, BAD], MemorySink())
        self.assertEqual(
            format_summary(outcome),
            "Processing finished.\nEvents created: 1\nErrors encountered: 1",
        )


if __name__ == "__main__":
    unittest.main()
