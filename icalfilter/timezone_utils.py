"""
Timezone utilities for ical-filter.

Every instant leaving the normalizer is a timezone-aware datetime in UTC.
These helpers convert source values to UTC and format them for the two
output encodings.
"""

from datetime import datetime, date
from typing import Optional
import pytz

from .logging_setup import get_logger


logger = get_logger(__name__)

ISO_UTC_FORMAT = "%Y-%m-%dT%H:%M:%SZ"


def resolve_timezone(tzid: Optional[str]):
    """
    Resolve an IANA timezone identifier.

    Args:
        tzid: Identifier such as ``Europe/Amsterdam``, or None.

    Returns:
        A pytz timezone, or pytz.UTC when tzid is empty or unknown.
    """
    if not tzid:
        return pytz.UTC
    try:
        return pytz.timezone(tzid)
    except pytz.UnknownTimeZoneError:
        logger.warning("unknown_timezone", tzid=tzid, fallback="UTC")
        return pytz.UTC


def to_utc_datetime(value, tzid: Optional[str] = None) -> datetime:
    """
    Convert a source date/datetime to an aware UTC datetime.

    Args:
        value: A datetime (aware or naive) or a date.
        tzid: TZID parameter of the source property, used only when
            value is naive.

    Returns:
        A timezone-aware datetime in UTC.
        Aware values are converted; naive values are localized in tzid
        (UTC if absent); dates become midnight UTC.
    """
    if not isinstance(value, datetime):
        if not isinstance(value, date):
            raise TypeError(f"expected date or datetime, got {type(value).__name__}")
        value = datetime.combine(value, datetime.min.time())

    if value.tzinfo is None:
        value = resolve_timezone(tzid).localize(value)

    return value.astimezone(pytz.UTC)


def utc_now() -> datetime:
    """Current time in UTC, truncated to whole seconds."""
    return datetime.now(pytz.UTC).replace(microsecond=0)


def format_iso_utc(dt: datetime) -> str:
    """Format as ISO-8601 with a ``Z`` suffix, e.g. ``2020-07-03T08:55:14Z``."""
    return dt.astimezone(pytz.UTC).strftime(ISO_UTC_FORMAT)

