"""
ical-filter core module

Fetches an iCalendar feed, normalizes its events to UTC and filters them
by title:
- Configuration (config.py)
- Filter expressions (filter_expression.py)
- Event normalization (event_normalizer.py, timezone_utils.py)
- Feed fetching and parsing (feed_source.py)
- JSON and iCalendar output (renderers.py)
- Request pipeline (pipeline.py)
"""

__version__ = "0.3.0"

from .config import Config
from .errors import (
    ICalFilterError,
    InvalidFilter,
    InvalidFilterSyntax,
    InvalidFilterCondition,
    InvalidFilterPattern,
    FetchError,
    SourceParseError,
    EntryNormalizationError,
    MissingRequiredField,
    MalformedField,
)
from .filter_expression import FilterCondition, FilterClause, FilterExpression
from .event_normalizer import CanonicalEvent, normalize_event
from .feed_source import FeedFetcher
from .pipeline import FeedPipeline, OutputFormat

__all__ = [
    '__version__',
    'Config',
    'ICalFilterError',
    'InvalidFilter',
    'InvalidFilterSyntax',
    'InvalidFilterCondition',
    'InvalidFilterPattern',
    'FetchError',
    'SourceParseError',
    'EntryNormalizationError',
    'MissingRequiredField',
    'MalformedField',
    'FilterCondition',
    'FilterClause',
    'FilterExpression',
    'CanonicalEvent',
    'normalize_event',
    'FeedFetcher',
    'FeedPipeline',
    'OutputFormat',
]
