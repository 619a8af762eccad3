"""
Normalization of source VEVENTs into canonical UTC events.

The canonical model keeps only what the outputs need: identity, title and
four instants, all in UTC. Source events come from icalendar and may use
any mix of UTC, offset, TZID-annotated, floating and date-only values.
"""

from dataclasses import dataclass
from datetime import datetime, date, timedelta
from typing import Optional
from icalendar import Event as ICalEvent

from .errors import MalformedField, MissingRequiredField
from .timezone_utils import format_iso_utc, to_utc_datetime


@dataclass(frozen=True)
class CanonicalEvent:
    """A single timed calendar event with all instants in UTC."""
    uid: str
    summary: str
    stamp: datetime    # When the source record was generated
    created: datetime  # When the appointment was created
    start: datetime
    end: datetime

    def to_dict(self) -> dict:
        """JSON representation. Key order is part of the output format."""
        return {
            "uid": self.uid,
            "summary": self.summary,
            "stamp": format_iso_utc(self.stamp),
            "created": format_iso_utc(self.created),
            "start": format_iso_utc(self.start),
            "end": format_iso_utc(self.end),
        }

    def __repr__(self):
        return f"CanonicalEvent(uid={self.uid!r}, summary={self.summary!r}, start={self.start})"


def first_property(component: ICalEvent, name: str):
    """Get a property, taking the first value when it occurs more than once."""
    value = component.get(name)
    if isinstance(value, list):
        return value[0] if value else None
    return value


def _text(component: ICalEvent, name: str) -> str:
    """Get a required text property."""
    value = first_property(component, name)
    if value is None:
        raise MissingRequiredField(name)
    text = str(value)
    if not text:
        raise MissingRequiredField(name)
    return text


def _instant(component: ICalEvent, name: str) -> Optional[datetime]:
    """
    Get a date/time property as a UTC datetime.

    Returns:
        The instant in UTC, or None if the property is absent.

    Raises:
        MalformedField: the property value is not a date or datetime
    """
    prop = first_property(component, name)
    if prop is None:
        return None

    value = getattr(prop, 'dt', None)
    if not isinstance(value, (datetime, date)):
        raise MalformedField(name)

    tzid = None
    params = getattr(prop, 'params', None)
    if params is not None:
        tzid = params.get('TZID')

    return to_utc_datetime(value, tzid)


def _end(component: ICalEvent, start: datetime) -> datetime:
    """DTEND, or DTSTART + DURATION when DTEND is absent."""
    end = _instant(component, 'DTEND')
    if end is not None:
        return end

    prop = first_property(component, 'DURATION')
    if prop is None:
        raise MissingRequiredField('DTEND')

    duration = getattr(prop, 'dt', None) or getattr(prop, 'td', None)
    if not isinstance(duration, timedelta):
        raise MalformedField('DURATION')
    return start + duration


def normalize_event(component: ICalEvent, now: datetime) -> CanonicalEvent:
    """
    Convert an icalendar VEVENT into a CanonicalEvent.

    Args:
        component: The source VEVENT
        now: Processing time (UTC), used when DTSTAMP is absent

    Returns:
        The normalized event. CREATED defaults to the start time.

    Raises:
        MissingRequiredField: UID, SUMMARY, DTSTART or DTEND (and DURATION)
            is absent
        MalformedField: a date/time property does not hold a date/time
    """
    uid = _text(component, 'UID')
    summary = _text(component, 'SUMMARY')

    start = _instant(component, 'DTSTART')
    if start is None:
        raise MissingRequiredField('DTSTART')
    end = _end(component, start)

    stamp = _instant(component, 'DTSTAMP')
    created = _instant(component, 'CREATED')

    return CanonicalEvent(
        uid=uid,
        summary=summary,
        stamp=stamp if stamp is not None else now,
        created=created if created is not None else start,
        start=start,
        end=end,
    )
