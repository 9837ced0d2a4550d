"""Declarative metric specification layer.

A ``MetricSpec`` describes one exportable metric: its name, ordered label
schema, policy flags and the optional capability that produces its values.

Producers are strategy objects (``Producer`` protocol). A spec whose values are
written by a sibling's producer (for example ``vcpus_used`` emitted during the
``running_vms`` hypervisor pass) carries the explicit ``DECLARED_ONLY``
variant instead of a producer; the registry still creates its descriptor so
the sibling can address it by name.
"""
from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:  # pragma: no cover
    from .conduit import SampleSink
    from .registry import MetricRegistry


class Producer(Protocol):
    """Capability writing zero or more samples for one scrape pass.

    Raise any exception to signal failure; samples already written stand.
    """

    def produce(self, registry: MetricRegistry, out: SampleSink) -> None: ...


class _DeclaredOnly:
    """Absent-producer variant: the spec only declares a label schema."""

    __slots__ = ()

    def __repr__(self) -> str:
        return "DECLARED_ONLY"


DECLARED_ONLY = _DeclaredOnly()


@dataclass(frozen=True)
class MetricSpec:
    name: str                                   # Short name, unique within a registry
    labels: Sequence[str] = ()                  # Ordered label keys
    producer: Producer | _DeclaredOnly = DECLARED_ONLY
    deprecated_since: str | None = None         # Compute microversion that removed the data
    slow: bool = False                          # Expensive; opt-in only
    doc: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "labels", tuple(self.labels))
        if not self.doc:
            object.__setattr__(self, "doc", self.name.replace("_", " "))

    @property
    def has_producer(self) -> bool:
        return self.producer is not DECLARED_ONLY


__all__ = ["MetricSpec", "Producer", "DECLARED_ONLY"]
