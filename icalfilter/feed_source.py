"""
Fetching and parsing of remote ICS feeds.

Each request fetches its feed fresh; nothing is cached between requests.
"""

import requests
from typing import Iterator
from icalendar import Calendar as ICalCalendar, Event as ICalEvent

from .config import Config
from .errors import FetchError, SourceParseError
from .logging_setup import get_logger


logger = get_logger(__name__)

BYTE_ORDER_MARK = "\ufeff"


def normalize_feed_url(url: str) -> str:
    """Map ``webcal://`` URLs to ``https://``; other URLs are unchanged."""
    if url.lower().startswith('webcal://'):
        return 'https://' + url[len('webcal://'):]
    return url


class FeedFetcher:
    """HTTP client for calendar feeds."""

    def __init__(self, timeout: float = 30.0, user_agent: str = "ical-filter"):
        """
        Args:
            timeout: Request timeout in seconds
            user_agent: User-Agent header sent upstream
        """
        self.timeout = timeout
        self.user_agent = user_agent

    @classmethod
    def from_config(cls, config: Config) -> 'FeedFetcher':
        return cls(timeout=config.fetch_timeout, user_agent=config.user_agent)

    def fetch(self, url: str) -> str:
        """
        Fetch the feed body.

        Args:
            url: Feed location (http, https or webcal)

        Returns:
            The response body decoded as UTF-8, without a leading BOM.

        Raises:
            FetchError: connection failure, timeout or non-2xx status
        """
        target = normalize_feed_url(url)
        logger.debug("fetching_feed", url=target)
        try:
            response = requests.get(
                target,
                timeout=self.timeout,
                headers={
                    'User-Agent': self.user_agent,
                    'Accept': 'text/calendar'
                }
            )
            response.raise_for_status()
        except requests.Timeout as e:
            raise FetchError(f"Timed out fetching {url}") from e
        except requests.HTTPError as e:
            raise FetchError(
                f"Upstream returned {e.response.status_code} for {url}"
            ) from e
        except requests.RequestException as e:
            raise FetchError(f"Network error fetching {url}: {e}") from e

        # Feeds frequently omit the charset; iCalendar is UTF-8 by definition.
        # Exchange and Outlook exports prefix a byte-order mark.
        logger.debug("fetched_feed", url=target, size=len(response.content))
        return response.content.decode('utf-8-sig', errors='replace')


def parse_calendars(ical_text: str) -> list[ICalCalendar]:
    """
    Parse iCalendar text into one or more icalendar.Calendar objects.

    Raises:
        SourceParseError: the text is not a calendar document
    """
    ical_text = ical_text.removeprefix(BYTE_ORDER_MARK)
    try:
        calendars = ICalCalendar.from_ical(ical_text, multiple=True)
    except ValueError as e:
        raise SourceParseError(f"Invalid calendar data: {e}") from e

    calendars = [c for c in calendars if c.name == 'VCALENDAR']
    if not calendars:
        raise SourceParseError("No VCALENDAR found in feed")
    return calendars


def iter_source_events(calendars: list[ICalCalendar]) -> Iterator[ICalEvent]:
    """Yield the VEVENTs of all calendars in document order."""
    for calendar in calendars:
        for component in calendar.subcomponents:
            if component.name == 'VEVENT':
                yield component
