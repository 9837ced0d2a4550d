"""Sample conduit between producers and the exposition layer.

Producers write ``Sample`` tuples through a ``SampleSink``. During a real
scrape the sink is a ``ScrapeConduit``: a bounded queue drained by the
Prometheus collect hook, so a slow consumer blocks producers instead of the
scrape buffering without limit.
"""
from __future__ import annotations

import queue
from collections.abc import Iterator
from typing import NamedTuple, Protocol


class Sample(NamedTuple):
    name: str
    label_values: tuple[str, ...]
    value: float


class SampleSink(Protocol):
    def put(self, sample: Sample) -> None: ...


class ListSink:
    """Unbounded in-memory sink (tests, one-shot dumps)."""

    def __init__(self) -> None:
        self.samples: list[Sample] = []

    def put(self, sample: Sample) -> None:
        self.samples.append(sample)

    def by_name(self, name: str) -> list[Sample]:
        return [s for s in self.samples if s.name == name]


_CLOSED = object()


class ScrapeConduit:
    """Bounded single-pass conduit. ``put`` blocks while the queue is full."""

    def __init__(self, maxsize: int = 1000):
        self._queue: queue.Queue = queue.Queue(maxsize=maxsize)

    def put(self, sample: Sample) -> None:
        self._queue.put(sample)

    def close(self) -> None:
        self._queue.put(_CLOSED)

    def __iter__(self) -> Iterator[Sample]:
        while True:
            item = self._queue.get()
            if item is _CLOSED:
                return
            yield item


__all__ = ["Sample", "SampleSink", "ListSink", "ScrapeConduit"]
