"""Diagnostics sinks for probe events.

A sink receives one ``ProbeEvent`` per probed candidate. Sinks are injected
into resolvers explicitly; resolution never depends on what a sink does
with an event.
"""

import logging
import threading
from typing import Any, Dict, List, Protocol, runtime_checkable

from .models import ProbeEvent

logger = logging.getLogger(__name__)


@runtime_checkable
class DiagnosticsSink(Protocol):
    """Anything with a ``record(event)`` method."""

    def record(self, event: ProbeEvent) -> None:
        ...


class NullSink:
    """Sink that discards every event."""

    def record(self, event: ProbeEvent) -> None:
        pass


class MemorySink:
    """Thread-safe in-memory log of probe successes and failures."""

    def __init__(self) -> None:
        self._events: List[ProbeEvent] = []
        self._lock = threading.Lock()

    def record(self, event: ProbeEvent) -> None:
        with self._lock:
            self._events.append(event)

    @property
    def events(self) -> List[ProbeEvent]:
        with self._lock:
            return list(self._events)

    @property
    def successes(self) -> List[ProbeEvent]:
        return [event for event in self.events if event.ok]

    @property
    def failures(self) -> List[ProbeEvent]:
        return [event for event in self.events if not event.ok]

    def get_metrics(self) -> Dict[str, Any]:
        """Get probe metrics.

        Returns:
            Dictionary of metrics
        """
        events = self.events
        total = len(events)
        successful = sum(1 for event in events if event.ok)

        metrics: Dict[str, Any] = {
            "total_probes": total,
            "successful_probes": successful,
            "failed_probes": total - successful,
            "images": len({event.original_url for event in events}),
        }

        if total > 0:
            metrics["success_rate"] = successful / total
        else:
            metrics["success_rate"] = 0.0

        # Which chain position tends to work, keyed by candidate index
        by_index: Dict[int, int] = {}
        for event in events:
            if event.ok:
                by_index[event.index] = by_index.get(event.index, 0) + 1
        metrics["successes_by_index"] = by_index

        return metrics

    def clear(self) -> None:
        with self._lock:
            self._events.clear()


class LoggingSink:
    """Sink that writes each event to a logger."""

    def __init__(self, log: logging.Logger = logger) -> None:
        self.log = log

    def record(self, event: ProbeEvent) -> None:
        if event.ok:
            self.log.info("Image loaded: %s -> %s", event.original_url, event.candidate_url)
        else:
            self.log.info(
                "Image failed to load: %s -> %s%s",
                event.original_url,
                event.candidate_url,
                f" ({event.error})" if event.error else "",
            )


class MultiSink:
    """Fan one event out to several sinks."""

    def __init__(self, *sinks: DiagnosticsSink) -> None:
        self.sinks = list(sinks)

    def record(self, event: ProbeEvent) -> None:
        for sink in self.sinks:
            sink.record(event)
