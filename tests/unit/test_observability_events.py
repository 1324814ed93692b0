"""Tests for structured events, counters, and timers."""

from __future__ import annotations

import json
import logging

import pytest

from rightguard.observability import Observability, StatsdSink, _format_number
from rightguard.settings import get_settings


class _RecordingSink:
    def __init__(self) -> None:
        self.lines = []

    def send(self, metric, value, metric_type, tags=None):
        self.lines.append((metric, value, metric_type, tags))


class _FakeSocket:
    def __init__(self) -> None:
        self.sent = []

    def sendto(self, data, address):
        self.sent.append((data.decode("utf-8"), address))


def _settings(structured: bool):
    settings = get_settings()
    return settings.model_copy(
        update={"observability": settings.observability.model_copy(update={"structured_logging": structured})}
    )


def test_structured_events_are_json(caplog):
    obs = Observability(settings=_settings(True), component="alerts")

    with caplog.at_level(logging.INFO, logger="rightguard.observability"):
        obs.emit_event("alert.dispatched", user_id="u-1", successful=2, recipients=("a", "b"))

    payload = json.loads(caplog.records[-1].getMessage())
    assert payload["event"] == "alert.dispatched"
    assert payload["component"] == "alerts"
    assert payload["successful"] == 2
    assert payload["recipients"] == ["a", "b"]


def test_plain_events_name_the_event(caplog):
    obs = Observability(settings=_settings(False), component="payments")

    with caplog.at_level(logging.INFO, logger="rightguard.observability"):
        obs.emit_event("entitlement.granted", feature_key="stateSpecific")

    assert caplog.records[-1].getMessage().startswith("entitlement.granted | ")


def test_counters_drop_empty_tags():
    sink = _RecordingSink()
    obs = Observability(settings=_settings(False), sink=sink)

    obs.increment("recordings.saved", tags={"media": "pinned", "skipped": None})
    obs.increment("alerts.failed", value=0)

    assert sink.lines == [
        ("recordings.saved", 1.0, "c", {"media": "pinned"}),
        ("alerts.failed", 0, "c", None),
    ]


def test_timer_reports_even_when_the_block_raises():
    sink = _RecordingSink()
    obs = Observability(settings=_settings(False), sink=sink)

    with pytest.raises(RuntimeError):
        with obs.timed("guides.generation_ms", tags={"language": "es"}):
            raise RuntimeError("model offline")

    metric, value, metric_type, tags = sink.lines[0]
    assert (metric, metric_type, tags) == ("guides.generation_ms", "ms", {"language": "es"})
    assert value >= 0


def test_metrics_are_dropped_without_a_sink():
    obs = Observability(settings=_settings(False))
    obs.increment("alerts.failed", value=3)
    with obs.timed("payments.verify_ms"):
        pass


def test_statsd_line_format():
    sink = StatsdSink("127.0.0.1", 8125, "rightguard.")
    fake = _FakeSocket()
    sink._socket = fake

    sink.send("alerts.delivered", 2.0, "c", {"env": "dev", "channel": "sms"})

    assert fake.sent == [("rightguard.alerts.delivered:2|c|#channel:sms,env:dev", ("127.0.0.1", 8125))]


def test_format_number_trims_trailing_zeros():
    assert _format_number(2.0) == "2"
    assert _format_number(0.25) == "0.25"
    assert _format_number(0.0) == "0"
