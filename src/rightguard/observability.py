"""Structured service events and StatsD counters/timers for Right Guard."""

from __future__ import annotations

import json
import logging
import socket
import threading
import time
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Iterator, Mapping

from rightguard.settings import Settings, get_settings

_LOGGER = logging.getLogger("rightguard.observability")
_SINK_LOCK = threading.Lock()
_SHARED_SINK: "StatsdSink | None" = None

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def configure_logging(settings: Settings | None = None) -> None:
    """Apply the configured log level once per process."""

    resolved = settings or get_settings()
    level = getattr(logging, resolved.log_level.upper(), logging.INFO)
    logging.basicConfig(level=level, format=LOG_FORMAT)


class StatsdSink:
    """Fire-and-forget UDP StatsD writer (DogStatsD tag syntax)."""

    def __init__(self, host: str, port: int, prefix: str = "") -> None:
        self.address = (host, port)
        self.prefix = prefix.rstrip(".")
        self._socket: socket.socket | None = None

    def send(self, metric: str, value: float, metric_type: str, tags: Mapping[str, str] | None = None) -> None:
        name = f"{self.prefix}.{metric}" if self.prefix else metric
        line = f"{name}:{_format_number(value)}|{metric_type}"
        if tags:
            line += "|#" + ",".join(f"{key}:{val}" for key, val in sorted(tags.items()))
        if self._socket is None:
            self._socket = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
        try:
            self._socket.sendto(line.encode("utf-8"), self.address)
        except OSError:  # pragma: no cover - UDP send failures are not actionable
            _LOGGER.debug("StatsD write failed for %s", metric, exc_info=True)


class Observability:
    """Per-component event log plus optional StatsD metrics.

    Events are one log line each: a JSON object when structured logging is
    on, ``"<event> | {...}"`` otherwise. Metrics are dropped silently when no
    StatsD host is configured.
    """

    def __init__(
        self,
        *,
        settings: Settings,
        component: str | None = None,
        sink: StatsdSink | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.component = component or "core"
        self._sink = sink
        self._logger = logger or _LOGGER
        self._json_lines = bool(settings.observability.structured_logging)

    def emit_event(self, event: str, **fields: Any) -> None:
        record = {
            "event": event,
            "component": self.component,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
        record.update({str(key): _jsonable(value) for key, value in fields.items()})
        if self._json_lines:
            self._logger.info(json.dumps(record))
        else:
            self._logger.info("%s | %s", event, record)

    def increment(self, metric: str, *, value: float = 1.0, tags: Mapping[str, Any] | None = None) -> None:
        if self._sink is not None:
            self._sink.send(metric, value, "c", _clean_tags(tags))

    @contextmanager
    def timed(self, metric: str, *, tags: Mapping[str, Any] | None = None) -> Iterator[None]:
        """Report the wall time of the block in milliseconds, whether or not it raises."""

        started = time.perf_counter()
        try:
            yield
        finally:
            if self._sink is not None:
                elapsed_ms = (time.perf_counter() - started) * 1000.0
                self._sink.send(metric, elapsed_ms, "ms", _clean_tags(tags))


def get_observability(*, component: str | None = None, settings: Settings | None = None) -> Observability:
    """Return an :class:`Observability` for ``component`` sharing the process-wide StatsD sink."""

    resolved = settings or get_settings()
    return Observability(settings=resolved, component=component, sink=_shared_sink(resolved))


def reset_observability_cache() -> None:
    """Forget the shared StatsD sink so the next call re-reads settings."""

    global _SHARED_SINK
    with _SINK_LOCK:
        _SHARED_SINK = None


def _shared_sink(settings: Settings) -> StatsdSink | None:
    global _SHARED_SINK
    obs = settings.observability
    if not obs.statsd_host:
        return None
    with _SINK_LOCK:
        if _SHARED_SINK is None:
            _SHARED_SINK = StatsdSink(obs.statsd_host, obs.statsd_port, obs.statsd_prefix)
        return _SHARED_SINK


def _jsonable(value: Any) -> Any:
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    if isinstance(value, Mapping):
        return {str(key): _jsonable(item) for key, item in value.items()}
    if isinstance(value, (list, tuple, set)):
        return [_jsonable(item) for item in value]
    return str(value)


def _clean_tags(tags: Mapping[str, Any] | None) -> dict[str, str] | None:
    if not tags:
        return None
    return {str(key): str(value) for key, value in tags.items() if value is not None} or None


def _format_number(value: float) -> str:
    return f"{value:.6f}".rstrip("0").rstrip(".") or "0"


__all__ = ["Observability", "StatsdSink", "configure_logging", "get_observability", "reset_observability_cache"]
