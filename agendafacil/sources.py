"""
Row sources: where candidate link strings come from.

Every source is a lazy iterable of strings, one per row, in input order.
Rows that are not event links are NOT filtered here; the batch driver
skips them so that row numbers stay aligned with the input.

Supported inputs:
- plain text files (one cell per line)
- CSV exports (one column, column A by default)
- HTML pages / tables (e.g. a sheet published to the web)
- remote CSV or HTML exports fetched over HTTP
"""

from __future__ import annotations

import csv
import io
from pathlib import Path
from typing import Iterable, Iterator, Protocol
from urllib.parse import parse_qs, urlsplit

import requests
from bs4 import BeautifulSoup


DEFAULT_TIMEOUT = 30

# published sheets wrap cell links in a redirect: https://www.google.com/url?q=<target>&sa=D...
REDIRECT_PREFIXES = ("https://www.google.com/url?", "https://google.com/url?")


class RowSource(Protocol):
    def __iter__(self) -> Iterator[str]: ...


# ---------------------------------------------------------------------------
# Parsing helpers (shared by file and URL sources)
# ---------------------------------------------------------------------------


def _csv_column(lines: Iterable[str], column: int) -> Iterator[str]:
    for record in csv.reader(lines):
        # short or empty records still count as a row
        yield record[column] if column < len(record) else ""


def _unwrap_redirect(href: str) -> str:
    href = href.strip()
    if not href.startswith(REDIRECT_PREFIXES):
        return href
    targets = parse_qs(urlsplit(href).query).get("q")
    return targets[0] if targets else href


def _html_rows(html: str) -> Iterator[str]:
    """
    Yield the first data cell (<td>) of every table row, preferring a link
    target over the cell text. Row-number <th> cells and header-only rows
    of a published sheet are ignored. Pages without a table yield every
    link target instead.
    """
    soup = BeautifulSoup(html, "html.parser")

    table = soup.find("table")
    if table is None:
        for a in soup.select("a[href]"):
            yield _unwrap_redirect(a["href"])
        return

    for tr in table.find_all("tr"):
        first = tr.find("td")
        if first is None:
            continue
        link = first.find("a", href=True)
        if link is not None:
            yield _unwrap_redirect(link["href"])
        else:
            yield first.get_text(strip=True)


# ---------------------------------------------------------------------------
# Sources
# ---------------------------------------------------------------------------


class TextRowSource:
    """
    One candidate per line of a UTF-8 text file.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def __iter__(self) -> Iterator[str]:
        with self.path.open(encoding="utf-8") as fh:
            for line in fh:
                yield line.rstrip("\r\n")


class CsvRowSource:
    """
    One column of a CSV file. column=0 is spreadsheet column A.
    """

    def __init__(self, path: str | Path, column: int = 0) -> None:
        if column < 0:
            raise ValueError(f"column must be >= 0, got {column}")
        self.path = Path(path)
        self.column = column

    def __iter__(self) -> Iterator[str]:
        with self.path.open(encoding="utf-8", newline="") as fh:
            yield from _csv_column(fh, self.column)


class HtmlRowSource:
    def __init__(self, html: str) -> None:
        self.html = html

    @classmethod
    def from_file(cls, path: str | Path) -> HtmlRowSource:
        return cls(Path(path).read_text(encoding="utf-8"))

    def __iter__(self) -> Iterator[str]:
        return _html_rows(self.html)


class UrlRowSource:
    """
    A remote export (CSV or HTML) fetched once, on first iteration.

    HTTP errors propagate as requests exceptions.
    """

    def __init__(self, url: str, column: int = 0, timeout: float = DEFAULT_TIMEOUT) -> None:
        if column < 0:
            raise ValueError(f"column must be >= 0, got {column}")
        self.url = url
        self.column = column
        self.timeout = timeout

    def __iter__(self) -> Iterator[str]:
        resp = requests.get(self.url, timeout=self.timeout)
        resp.raise_for_status()

        content_type = resp.headers.get("Content-Type", "").lower()
        if "html" in content_type:
            yield from _html_rows(resp.text)
        else:
            yield from _csv_column(io.StringIO(resp.text, newline=""), self.column)


def open_source(location: str, column: int = 0) -> RowSource:
    """
    Pick a RowSource for a path or URL.

    http(s) URL -> UrlRowSource, .csv -> CsvRowSource,
    .htm/.html -> HtmlRowSource, anything else -> TextRowSource.
    """
    if location.startswith(("http://", "https://")):
        return UrlRowSource(location, column=column)

    path = Path(location)
    suffix = path.suffix.lower()
    if suffix == ".csv":
        return CsvRowSource(path, column=column)
    if suffix in (".htm", ".html"):
        return HtmlRowSource.from_file(path)
    return TextRowSource(path)
