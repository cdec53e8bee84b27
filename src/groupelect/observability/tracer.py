"""
Tracers injected into the election coordinator.

The coordinator only ever opens a span around each membership hook and,
when it gets a span back, sets a few attributes on it. Three tracers
satisfy that contract:

- NullTracer: tracing disabled or OpenTelemetry missing
- OpenTelemetryTracer: real spans from the global tracer provider
- MockTracer: records every span in memory for tests

Example:
    >>> tracer = create_tracer(__name__, enable_tracing=True)
    >>> with tracer.span("groupelect.coordinator.on_revoked", {"groupelect.epoch": 3}) as span:
    ...     if span:
    ...         span.set_attribute("groupelect.coordinator.state", "active")
"""

from __future__ import annotations

import contextlib
from collections.abc import Iterator
from contextlib import AbstractContextManager
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from groupelect.observability.tracing import OTEL_AVAILABLE

if TYPE_CHECKING:
    from opentelemetry.trace import Span


@runtime_checkable
class Tracer(Protocol):
    """Opens spans around coordinator hooks."""

    def span(
        self,
        name: str,
        attributes: dict[str, Any] | None = None,
    ) -> AbstractContextManager[Any]:
        """
        Open a span.

        The context manager yields an object with ``set_attribute`` or
        None when nothing is recorded.
        """
        ...

    @property
    def enabled(self) -> bool: ...


class NullTracer:
    """Tracer that records nothing."""

    @contextlib.contextmanager
    def span(
        self,
        name: str,
        attributes: dict[str, Any] | None = None,
    ) -> Iterator[None]:
        yield None

    @property
    def enabled(self) -> bool:
        return False


class OpenTelemetryTracer:
    """
    Tracer backed by ``opentelemetry.trace.get_tracer``.

    Args:
        tracer_name: Instrumentation scope, usually the module ``__name__``

    Raises:
        ImportError: If opentelemetry-api is not installed
    """

    def __init__(self, tracer_name: str) -> None:
        from opentelemetry import trace

        self._tracer = trace.get_tracer(tracer_name)

    def span(
        self,
        name: str,
        attributes: dict[str, Any] | None = None,
    ) -> AbstractContextManager[Span]:
        return self._tracer.start_as_current_span(name, attributes=attributes or {})

    @property
    def enabled(self) -> bool:
        return True


@dataclass
class RecordedSpan:
    """A span captured by MockTracer."""

    name: str
    attributes: dict[str, Any] = field(default_factory=dict)

    def set_attribute(self, key: str, value: Any) -> None:
        self.attributes[key] = value


class MockTracer:
    """
    In-memory tracer for tests.

    Attributes passed when the span opens and attributes set on the
    yielded span end up in the same RecordedSpan.

    Example:
        >>> tracer = MockTracer()
        >>> with tracer.span("groupelect.coordinator.on_revoked", {"groupelect.epoch": 1}):
        ...     pass
        >>> tracer.span_names
        ['groupelect.coordinator.on_revoked']
    """

    def __init__(self) -> None:
        self.spans: list[RecordedSpan] = []

    @contextlib.contextmanager
    def span(
        self,
        name: str,
        attributes: dict[str, Any] | None = None,
    ) -> Iterator[RecordedSpan]:
        recorded = RecordedSpan(name, dict(attributes or {}))
        self.spans.append(recorded)
        yield recorded

    @property
    def enabled(self) -> bool:
        return True

    @property
    def span_names(self) -> list[str]:
        return [span.name for span in self.spans]

    def find(self, name: str) -> list[RecordedSpan]:
        """All recorded spans called ``name``, oldest first."""
        return [span for span in self.spans if span.name == name]

    def clear(self) -> None:
        self.spans.clear()


def create_tracer(name: str, enable_tracing: bool = True) -> Tracer:
    """
    Pick a tracer for a component.

    Returns an OpenTelemetryTracer when tracing is enabled and
    OpenTelemetry is importable, otherwise a NullTracer.
    """
    if enable_tracing and OTEL_AVAILABLE:
        return OpenTelemetryTracer(name)
    return NullTracer()


__all__ = [
    "MockTracer",
    "NullTracer",
    "OpenTelemetryTracer",
    "RecordedSpan",
    "Tracer",
    "create_tracer",
]
