"""
Validation counters exposed to an external monitoring collaborator.

The validator only increments counters through the narrow MetricsSink
interface; scraping, exposition format and ports belong to whatever exporter
is injected. CounterSink is an in-memory, thread-safe sink suitable for tests
and for exporters that poll `snapshot()`.

Counters
- records_validated
- records_rejected, tagged kind=<error class name>
"""

from __future__ import annotations

import threading
from collections import Counter
from typing import Protocol

__all__ = [
    "RECORDS_VALIDATED",
    "RECORDS_REJECTED",
    "MetricsSink",
    "NullSink",
    "CounterSink",
]

RECORDS_VALIDATED = "records_validated"
RECORDS_REJECTED = "records_rejected"


class MetricsSink(Protocol):
    """Counter-increment interface consumed by SchemaValidator."""

    def increment(self, name: str, value: int = 1, **tags: str) -> None: ...


class NullSink:
    """Discards every increment."""

    def increment(self, name: str, value: int = 1, **tags: str) -> None:
        return None


class CounterSink:
    """
    In-memory counters keyed by name and sorted tag pairs.

    Example:
        sink = CounterSink()
        validator = SchemaValidator(desc, metrics=sink)
        ...
        sink.get("records_rejected", kind="MissingFieldError")
    """

    def __init__(self) -> None:
        self._counts: Counter[tuple[str, tuple[tuple[str, str], ...]]] = Counter()
        self._lock = threading.Lock()

    def increment(self, name: str, value: int = 1, **tags: str) -> None:
        key = (name, tuple(sorted(tags.items())))
        with self._lock:
            self._counts[key] += value

    def get(self, name: str, **tags: str) -> int:
        """Current value of one counter series (0 if never incremented)."""
        with self._lock:
            return self._counts.get((name, tuple(sorted(tags.items()))), 0)

    def total(self, name: str) -> int:
        """Sum of a counter across all tag combinations."""
        with self._lock:
            return sum(v for (n, _), v in self._counts.items() if n == name)

    def snapshot(self) -> dict[str, dict[str, int]]:
        """
        Copy of all counters as {name: {rendered_tags: value}}.

        Tags render as "k=v,k2=v2" ("" when untagged).
        """
        out: dict[str, dict[str, int]] = {}
        with self._lock:
            for (name, tags), value in self._counts.items():
                rendered = ",".join(f"{k}={v}" for k, v in tags)
                out.setdefault(name, {})[rendered] = value
        return out

    def clear(self) -> None:
        with self._lock:
            self._counts.clear()
