"""Shared fixtures for the ical-filter tests."""

import sys
from datetime import datetime
from pathlib import Path

import pytest
import pytz

# Make the repository root importable without installing the package
root_path = Path(__file__).parent.parent
if str(root_path) not in sys.path:
    sys.path.insert(0, str(root_path))

from icalfilter.config import Config  # noqa: E402
from icalfilter.errors import FetchError  # noqa: E402
from icalfilter.pipeline import FeedPipeline  # noqa: E402


def ics(*lines: str) -> str:
    """Join iCalendar content lines with CRLF."""
    return "\r\n".join(lines) + "\r\n"


def vcalendar(*events: str) -> str:
    """Wrap VEVENT blocks (already joined) in a VCALENDAR."""
    return ics(
        "BEGIN:VCALENDAR",
        "VERSION:2.0",
        "PRODID:-//Example Corp//Test Feed//EN",
    ) + "".join(events) + ics("END:VCALENDAR")


def vevent(uid=None, summary=None, dtstart=None, dtend=None, dtstamp=None, created=None, extra=()):
    """
    Build a VEVENT block. Date/time arguments are full content lines
    without the property name, e.g. ``;TZID=Europe/Helsinki:20200125T100000``
    or ``:20200125T080000Z``.
    """
    lines = ["BEGIN:VEVENT"]
    if uid is not None:
        lines.append(f"UID:{uid}")
    if summary is not None:
        lines.append(f"SUMMARY:{summary}")
    if dtstamp is not None:
        lines.append(f"DTSTAMP{dtstamp}")
    if created is not None:
        lines.append(f"CREATED{created}")
    if dtstart is not None:
        lines.append(f"DTSTART{dtstart}")
    if dtend is not None:
        lines.append(f"DTEND{dtend}")
    lines.extend(extra)
    lines.append("END:VEVENT")
    return ics(*lines)


class FakeFetcher:
    """Stands in for FeedFetcher; records requested URLs."""

    def __init__(self, body: str = "", error: Exception = None):
        self.body = body
        self.error = error
        self.calls = []

    def fetch(self, url: str) -> str:
        self.calls.append(url)
        if self.error is not None:
            raise self.error
        return self.body


@pytest.fixture
def now():
    """Fixed processing time."""
    return datetime(2020, 7, 3, 12, 0, 0, tzinfo=pytz.UTC)


@pytest.fixture
def config():
    return Config()


@pytest.fixture
def sample_feed():
    """Three valid events, one without UID and one without DTEND."""
    return vcalendar(
        vevent(
            uid="lecture-1",
            summary="Lecture: Algorithms",
            dtstamp=":20200703T085514Z",
            created=":20200101T120000Z",
            dtstart=";TZID=Europe/Helsinki:20200125T100000",
            dtend=";TZID=Europe/Helsinki:20200125T120000",
        ),
        vevent(
            summary="Orphan without uid",
            dtstamp=":20200703T085514Z",
            dtstart=":20200126T080000Z",
            dtend=":20200126T090000Z",
        ),
        vevent(
            uid="exam-1",
            summary="Exam: Algorithms",
            dtstamp=":20200703T085514Z",
            created=":20200102T120000Z",
            dtstart=":20200130T090000Z",
            dtend=":20200130T120000Z",
        ),
        vevent(
            uid="no-end",
            summary="Lecture: Missing end",
            dtstamp=":20200703T085514Z",
            dtstart=":20200131T090000Z",
        ),
        vevent(
            uid="lecture-2",
            summary="Lecture: Databases",
            dtstamp=":20200703T085514Z",
            created=":20200103T120000Z",
            dtstart=":20200201T090000Z",
            dtend=":20200201T110000Z",
        ),
    )


@pytest.fixture
def fetcher(sample_feed):
    return FakeFetcher(sample_feed)


@pytest.fixture
def failing_fetcher():
    return FakeFetcher(error=FetchError("Upstream returned 404 for https://example.com/feed.ics"))


@pytest.fixture
def pipeline(config, fetcher):
    return FeedPipeline(config, fetcher=fetcher)
