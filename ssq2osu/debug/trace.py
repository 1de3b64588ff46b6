"""
Conversion tracing and logging setup.

Records the anomalies met while decoding and converting step charts
(skipped chunks, unsupported freezes, dropped events) so that a batch
run can be inspected afterwards.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any


class EventType(Enum):
    """Types of traced events."""
    CHUNK_SKIPPED = "chunk_skipped"
    EXTRA_IGNORED = "extra_ignored"
    FREEZE_UNSUPPORTED = "freeze_unsupported"
    FREEZE_UNMATCHED = "freeze_unmatched"
    EVENT_DROPPED = "event_dropped"
    CHART_FAILED = "chart_failed"


@dataclass
class TraceEvent:
    """A single trace event."""
    event_type: EventType
    data: dict[str, Any]
    chart: str = ""

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "event_type": self.event_type.value,
            "chart": self.chart,
            "data": self.data,
        }


@dataclass
class ConversionTracer:
    """
    Event tracer for conversion runs.

    Collects events in memory; `save()` writes them as JSON.
    """
    enabled: bool = True
    max_events: int = 100000

    _events: list[TraceEvent] = field(default_factory=list, init=False)
    _current_chart: str = field(default="", init=False)

    def start(self) -> None:
        """Start a fresh trace."""
        self._events.clear()
        self._current_chart = ""

    def set_chart(self, label: str) -> None:
        """Set the chart label attached to following events."""
        self._current_chart = label

    def trace(
        self,
        event_type: EventType,
        data: dict[str, Any] | None = None,
    ) -> None:
        if not self.enabled:
            return

        self._events.append(TraceEvent(
            event_type=event_type,
            data=data or {},
            chart=self._current_chart,
        ))

        if len(self._events) > self.max_events:
            self._events = self._events[-self.max_events // 2:]

    def trace_step(self, kind: str, **data: Any) -> None:
        """Record a step decoder anomaly; `kind` is an EventType value."""
        self.trace(EventType(kind), data)

    def trace_chunk(self, chunk_type: int, parameter: int, length: int) -> None:
        self.trace(EventType.CHUNK_SKIPPED, {
            "chunk_type": chunk_type,
            "parameter": parameter,
            "length": length,
        })

    def trace_drop(self, event: str, reason: str, **data: Any) -> None:
        """Record a gameplay event that could not be converted."""
        self.trace(EventType.EVENT_DROPPED, {"event": event, "reason": reason, **data})

    def trace_failure(self, error: str, details: dict | None = None) -> None:
        self.trace(EventType.CHART_FAILED, {
            "error": error,
            "details": details or {},
        })

    def get_events(
        self,
        event_type: EventType | None = None,
        chart: str | None = None,
    ) -> list[TraceEvent]:
        """
        Get filtered events.

        Args:
            event_type: Filter by event type.
            chart: Filter by chart label.

        Returns:
            Filtered list of events.
        """
        events = self._events

        if event_type:
            events = [e for e in events if e.event_type == event_type]

        if chart is not None:
            events = [e for e in events if e.chart == chart]

        return events

    def save(self, path: str | Path) -> None:
        """Save trace to a JSON file."""
        path = Path(path)

        data = {
            "event_count": len(self._events),
            "events": [e.to_dict() for e in self._events],
        }

        with path.open("w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)

    @classmethod
    def load(cls, path: str | Path) -> ConversionTracer:
        path = Path(path)

        with path.open(encoding="utf-8") as f:
            data = json.load(f)

        tracer = cls()
        for event_data in data.get("events", []):
            tracer._events.append(TraceEvent(
                event_type=EventType(event_data["event_type"]),
                data=event_data["data"],
                chart=event_data.get("chart", ""),
            ))

        return tracer

    def get_summary(self) -> dict[str, Any]:
        """Get summary statistics of traced events."""
        summary: dict[str, Any] = {
            "total_events": len(self._events),
            "charts": sorted({e.chart for e in self._events if e.chart}),
            "event_counts": {},
        }

        for event_type in EventType:
            count = sum(1 for e in self._events if e.event_type == event_type)
            if count > 0:
                summary["event_counts"][event_type.value] = count

        return summary


def setup_logging(
    level: int = logging.INFO,
    log_file: str | Path | None = None,
) -> None:
    """
    Configure logging for ssq2osu.

    Args:
        level: Logging level.
        log_file: Optional file to write logs to.
    """
    formatter = logging.Formatter(
        "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    root_logger = logging.getLogger("ssq2osu")
    root_logger.setLevel(level)
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
        handler.close()

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)
