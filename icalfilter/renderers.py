"""
Output encodings for canonical events: a JSON array and an iCalendar
document.
"""

import json
from datetime import datetime, timedelta
from typing import Iterable
from icalendar import (
    Calendar as ICalCalendar,
    Event as ICalEvent,
    Timezone as ICalTimezone,
    TimezoneStandard,
)

from .event_normalizer import CanonicalEvent


JSON_MEDIA_TYPE = "application/json"
ICAL_MEDIA_TYPE = "text/calendar; charset=utf-8"

DEFAULT_PRODID = "-//ical-filter//ical-filter//EN"


def render_json(events: Iterable[CanonicalEvent]) -> bytes:
    """
    Encode events as a compact JSON array.

    Field order and separators are fixed, so the same events always give
    the same bytes.
    """
    payload = [event.to_dict() for event in events]
    return json.dumps(payload, ensure_ascii=False, separators=(",", ":")).encode("utf-8")


def _utc_timezone() -> ICalTimezone:
    """VTIMEZONE block declaring UTC."""
    standard = TimezoneStandard()
    standard.add('dtstart', datetime(1970, 3, 29, 2, 0, 0))
    standard.add('tzoffsetfrom', timedelta(0))
    standard.add('tzoffsetto', timedelta(0))
    standard.add('tzname', 'UTC')

    timezone = ICalTimezone()
    timezone.add('tzid', 'UTC')
    timezone.add_component(standard)
    return timezone


def _to_vevent(event: CanonicalEvent) -> ICalEvent:
    vevent = ICalEvent()
    vevent.add('uid', event.uid)
    vevent.add('dtstamp', event.stamp)
    vevent.add('summary', event.summary)
    vevent.add('dtstart', event.start)
    vevent.add('dtend', event.end)
    vevent.add('created', event.created)
    return vevent


def build_calendar(events: Iterable[CanonicalEvent], prodid: str = DEFAULT_PRODID) -> ICalCalendar:
    """Wrap events in a VCALENDAR with a fixed UTC timezone declaration."""
    calendar = ICalCalendar()
    calendar.add('version', '2.0')
    calendar.add('prodid', prodid)
    calendar.add('calscale', 'GREGORIAN')
    calendar.add('method', 'PUBLISH')
    calendar.add_component(_utc_timezone())
    for event in events:
        calendar.add_component(_to_vevent(event))
    return calendar


def render_ical(events: Iterable[CanonicalEvent], prodid: str = DEFAULT_PRODID) -> bytes:
    """Encode events as a UTF-8 iCalendar document."""
    return build_calendar(events, prodid).to_ical()
