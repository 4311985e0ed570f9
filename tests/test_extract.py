"""
Unit tests for link parameter extraction.

Extraction contract:
- No query string -> all five fields empty, never an exception
- '+' is a space, '%2B' is a literal plus
- Unknown keys are dropped, the last duplicate wins
"""

import unittest

from agendafacil.extract import extract, is_event_link
from agendafacil.model import RawParameters

BASE = "https://www.google.com/calendar/render?action=TEMPLATE"


class TestExtract(unittest.TestCase):
    def test_full_link(self) -> None:
        url = (
            BASE
            + "&text=Team+Standup&dates=20250101T090000/20250101T100000"
            + "&details=Daily+sync&location=Room%201&recur=RRULE:FREQ%3DDAILY"
        )
        params = extract(url)

        self.assertEqual(params.text, "Team Standup")
        self.assertEqual(params.dates, "20250101T090000/20250101T100000")
        self.assertEqual(params.details, "Daily sync")
        self.assertEqual(params.location, "Room 1")
        self.assertEqual(params.recur, "RRULE:FREQ=DAILY")

    def test_no_query_string_returns_defaults(self) -> None:
        self.assertEqual(extract("https://www.google.com/calendar/render"), RawParameters())
        self.assertEqual(extract("https://www.google.com/calendar/render?"), RawParameters())
        self.assertEqual(extract(""), RawParameters())

    def test_plus_is_space_but_encoded_plus_is_not(self) -> None:
        self.assertEqual(extract(BASE + "&details=a+b").details, "a b")
        self.assertEqual(extract(BASE + "&details=Room%2B1%2Btea").details, "Room+1+tea")

    def test_missing_value_is_empty(self) -> None:
        params = extract(BASE + "&text=Lunch&details=&location")
        self.assertEqual(params.text, "Lunch")
        self.assertEqual(params.details, "")
        self.assertEqual(params.location, "")

    def test_value_split_on_first_equals_only(self) -> None:
        self.assertEqual(extract(BASE + "&details=a=b").details, "a=b")

    def test_unknown_keys_ignored_and_last_duplicate_wins(self) -> None:
        params = extract(BASE + "&text=First&foo=bar&text=Second&ctz=Europe/Lisbon")
        self.assertEqual(params.text, "Second")
        self.assertEqual(set(params.as_dict()), {"text", "dates", "details", "location", "recur"})

    def test_encoded_key_is_decoded(self) -> None:
        self.assertEqual(extract(BASE + "&%74ext=Hello").text, "Hello")

    def test_undecodable_pair_is_skipped_others_kept(self) -> None:
        # %FF is not valid UTF-8
        params = extract(BASE + "&text=Party&details=%FF&location=Home")
        self.assertEqual(params.text, "Party")
        self.assertEqual(params.details, "")
        self.assertEqual(params.location, "Home")

    def test_malformed_escape_skips_only_that_pair(self) -> None:
        for bad in ("100%zz", "50%", "%4"):
            with self.subTest(value=bad):
                params = extract(BASE + "&text=Party&details=" + bad + "&location=Home")
                self.assertEqual(params.text, "Party")
                self.assertEqual(params.details, "")
                self.assertEqual(params.location, "Home")

    def test_utf8_values(self) -> None:
        params = extract(BASE + "&text=Reuni%C3%A3o+mensal")
        self.assertEqual(params.text, "Reunião mensal")


class TestIsEventLink(unittest.TestCase):
    def test_accepts_default_prefix(self) -> None:
        self.assertTrue(is_event_link(BASE + "&text=x"))
        self.assertTrue(is_event_link("  " + BASE + "  "))

    def test_rejects_other_values(self) -> None:
        self.assertFalse(is_event_link(""))
        self.assertFalse(is_event_link(None))
        self.assertFalse(is_event_link(42))
        self.assertFalse(is_event_link("Links"))
        self.assertFalse(is_event_link("https://calendar.google.com/calendar/render?text=x"))

    def test_custom_prefixes(self) -> None:
        url = "https://calendar.google.com/calendar/render?text=x"
        self.assertTrue(is_event_link(url, prefixes=("https://calendar.google.com/calendar/",)))


if __name__ == "__main__":
    unittest.main()
