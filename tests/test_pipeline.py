"""Tests for the fetch -> normalize -> filter -> render pipeline."""

import json

import pytest
from structlog.testing import capture_logs

from icalfilter.errors import FetchError, SourceParseError
from icalfilter.filter_expression import FilterExpression
from icalfilter.pipeline import FeedPipeline, OutputFormat

from conftest import FakeFetcher, vcalendar, vevent


URL = "https://example.com/feed.ics"


def test_drops_entries_missing_required_fields(pipeline, now):
    events = pipeline.collect_events(URL, FilterExpression(), now)
    assert [e.uid for e in events] == ["lecture-1", "exam-1", "lecture-2"]


def test_dropped_entries_are_logged(pipeline, now):
    with capture_logs() as logs:
        pipeline.collect_events(URL, FilterExpression(), now)
    dropped = [log for log in logs if log["event"] == "dropping_event"]
    assert len(dropped) == 2
    assert dropped[0]["log_level"] == "warning"
    assert dropped[1]["uid"] == "no-end"
    assert "DTEND" in dropped[1]["reason"]


def test_filter_is_applied(pipeline, now):
    events = pipeline.collect_events(URL, FilterExpression.parse("startsWith:Lecture"), now)
    assert [e.uid for e in events] == ["lecture-1", "lecture-2"]


def test_multiple_clauses(pipeline, now):
    expression = FilterExpression.parse("contains:Algorithms~!startsWith:Exam")
    assert [e.uid for e in pipeline.collect_events(URL, expression, now)] == ["lecture-1"]


def test_contradiction_yields_nothing(pipeline, now):
    expression = FilterExpression.parse("contains:aaa~!true:")
    assert pipeline.collect_events(URL, expression, now) == []


def test_all_entries_invalid_renders_empty(config, now):
    feed = vcalendar(vevent(summary="no uid"), vevent(uid="x"))
    pipeline = FeedPipeline(config, fetcher=FakeFetcher(feed))
    assert pipeline.run(URL, FilterExpression(), OutputFormat.JSON, now) == b"[]"
    ical = pipeline.run(URL, FilterExpression(), OutputFormat.ICAL, now)
    assert b"BEGIN:VCALENDAR" in ical
    assert b"BEGIN:VEVENT" not in ical


def test_timezone_normalized_in_output(pipeline, now):
    body = pipeline.run(URL, FilterExpression.parse("equals:Lecture: Algorithms"), OutputFormat.JSON, now)
    assert json.loads(body) == [{
        "uid": "lecture-1",
        "summary": "Lecture: Algorithms",
        "stamp": "2020-07-03T08:55:14Z",
        "created": "2020-01-01T12:00:00Z",
        "start": "2020-01-25T08:00:00Z",
        "end": "2020-01-25T10:00:00Z",
    }]


def test_defaults_use_processing_time(config, now):
    feed = vcalendar(vevent(uid="a", summary="A", dtstart=":20200125T080000Z", dtend=":20200125T090000Z"))
    pipeline = FeedPipeline(config, fetcher=FakeFetcher(feed))
    event = json.loads(pipeline.run(URL, FilterExpression(), OutputFormat.JSON, now))[0]
    assert event["stamp"] == "2020-07-03T12:00:00Z"
    assert event["created"] == "2020-01-25T08:00:00Z"


def test_json_rendering_is_idempotent(pipeline, now):
    first = pipeline.run(URL, FilterExpression(), OutputFormat.JSON, now)
    second = pipeline.run(URL, FilterExpression(), OutputFormat.JSON, now)
    assert first == second


def test_ical_output(pipeline, now):
    body = pipeline.run(URL, FilterExpression.parse("startsWith:Exam"), OutputFormat.ICAL, now)
    assert body.count(b"BEGIN:VEVENT") == 1
    assert b"UID:exam-1" in body
    assert b"DTSTART:20200130T090000Z" in body


def test_fetch_error_propagates(config, failing_fetcher):
    pipeline = FeedPipeline(config, fetcher=failing_fetcher)
    with pytest.raises(FetchError):
        pipeline.collect_events(URL, FilterExpression())


def test_parse_error_propagates(config):
    pipeline = FeedPipeline(config, fetcher=FakeFetcher("this is not a calendar"))
    with pytest.raises(SourceParseError):
        pipeline.collect_events(URL, FilterExpression())


def test_fetcher_receives_url_unmodified(config, fetcher):
    FeedPipeline(config, fetcher=fetcher).collect_events("webcal://example.com/a.ics?x=1", FilterExpression())
    assert fetcher.calls == ["webcal://example.com/a.ics?x=1"]


def test_output_format_media_types():
    assert OutputFormat.JSON.media_type == "application/json"
    assert OutputFormat.ICAL.media_type.startswith("text/calendar")


def test_feed_with_byte_order_mark(config, now):
    pipeline = FeedPipeline(config, fetcher=FakeFetcher("\ufeffBEGIN:VCALENDAR\r\nEND:VCALENDAR\r\n"))
    assert pipeline.run(URL, FilterExpression(), OutputFormat.JSON, now) == b"[]"


def test_dropped_entry_logs_first_uid(config, now):
    feed = vcalendar(vevent(uid="a", extra=["UID:b"], dtstart=":20200125T080000Z"))
    pipeline = FeedPipeline(config, fetcher=FakeFetcher(feed))
    with capture_logs() as logs:
        assert pipeline.collect_events(URL, FilterExpression(), now) == []
    dropped = [log for log in logs if log["event"] == "dropping_event"]
    assert dropped[0]["uid"] == "a"
    assert "SUMMARY" in dropped[0]["reason"]
