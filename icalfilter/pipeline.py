"""
Request pipeline: fetch -> parse -> normalize -> filter -> render.

A FeedPipeline holds only read-only collaborators (configuration and
the fetcher), so one instance serves any number of concurrent requests.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from .config import Config
from .errors import EntryNormalizationError
from .event_normalizer import CanonicalEvent, first_property, normalize_event
from .feed_source import FeedFetcher, iter_source_events, parse_calendars
from .filter_expression import FilterExpression
from .logging_setup import get_logger
from .renderers import ICAL_MEDIA_TYPE, JSON_MEDIA_TYPE, render_ical, render_json
from .timezone_utils import utc_now


logger = get_logger(__name__)


class OutputFormat(Enum):
    """Supported output encodings."""
    JSON = "json"
    ICAL = "ical"

    @property
    def media_type(self) -> str:
        return JSON_MEDIA_TYPE if self is OutputFormat.JSON else ICAL_MEDIA_TYPE


class FeedPipeline:
    """Turns a feed URL and a filter expression into rendered output."""

    def __init__(self, config: Config, fetcher: Optional[FeedFetcher] = None):
        """
        Args:
            config: Process configuration
            fetcher: Feed client; built from config when omitted
        """
        self.config = config
        self.fetcher = fetcher if fetcher is not None else FeedFetcher.from_config(config)

    def normalize(self, ical_text: str, now: Optional[datetime] = None) -> list[CanonicalEvent]:
        """
        Parse calendar text and normalize all of its events.

        Events that cannot be normalized are logged and skipped; the
        result keeps source order.

        Raises:
            SourceParseError: the text is not a calendar document
        """
        if now is None:
            now = utc_now()

        events = []
        dropped = 0
        for component in iter_source_events(parse_calendars(ical_text)):
            try:
                events.append(normalize_event(component, now))
            except EntryNormalizationError as e:
                dropped += 1
                logger.warning(
                    "dropping_event",
                    uid=str(first_property(component, 'UID') or '') or None,
                    reason=e.message,
                )

        if dropped:
            logger.info("normalized_feed", events=len(events), dropped=dropped)
        return events

    def collect_events(
        self,
        url: str,
        expression: FilterExpression,
        now: Optional[datetime] = None
    ) -> list[CanonicalEvent]:
        """
        Fetch a feed and return the normalized events accepted by the filter.

        Raises:
            FetchError: the feed could not be fetched
            SourceParseError: the feed is not a calendar document
        """
        ical_text = self.fetcher.fetch(url)
        events = self.normalize(ical_text, now)
        accepted = [e for e in events if expression.accepts(e.summary)]
        logger.debug(
            "filtered_feed",
            url=url,
            filter=str(expression),
            total=len(events),
            accepted=len(accepted),
        )
        return accepted

    def render(self, events: list[CanonicalEvent], output: OutputFormat) -> bytes:
        """Encode events in the requested output format."""
        if output is OutputFormat.JSON:
            return render_json(events)
        return render_ical(events, prodid=self.config.prodid)

    def run(
        self,
        url: str,
        expression: FilterExpression,
        output: OutputFormat,
        now: Optional[datetime] = None
    ) -> bytes:
        """
        Process one request end to end and return the rendered body.

        Raises:
            FetchError: the feed could not be fetched
            SourceParseError: the feed is not a calendar document
        """
        return self.render(self.collect_events(url, expression, now), output)
