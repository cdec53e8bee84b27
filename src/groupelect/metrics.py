"""
OpenTelemetry metrics for primary election.

Without opentelemetry-api every instrument is a no-op; the in-process
snapshot keeps counting either way.

Example:
    >>> from groupelect.metrics import ElectionMetrics
    >>>
    >>> metrics = ElectionMetrics(group_id="registry")
    >>> metrics.record_round_computed(member_count=3, excluded_count=0)
    >>> metrics.record_round_completed("OK", epoch=7, is_primary=True)
    >>> metrics.record_revoked()

Metrics Exposed:
    - election.rounds.computed (Counter): Rounds computed as round leader
    - election.rounds.completed (Counter): Outcomes delivered to the listener
    - election.decode.failures (Counter): Payloads that failed to decode
    - election.revocations (Counter): Assignments revoked ahead of a rebalance
    - election.round.members (Histogram): Members taking part in computed rounds
    - election.epoch (Gauge): Epoch of the last completed round
    - election.is_primary (Gauge): 1 if this node is primary, else 0

All metrics include the 'group' attribute for filtering by group id.

The two gauges are registered once per meter. Each observation reads the
most recently created ElectionMetrics of its group, so a coordinator
rebuilt after a config change takes over the gauges of the one it replaces.
"""

from __future__ import annotations

import weakref
from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Any

from groupelect.types import NO_EPOCH

# opentelemetry-api is optional
try:
    from opentelemetry import metrics

    OTEL_METRICS_AVAILABLE = True
except ImportError:
    OTEL_METRICS_AVAILABLE = False
    metrics = None  # type: ignore[assignment]


# Shared by every ElectionMetrics in the process
_meter: Any = None

# Meter the gauges were last registered on
_gauge_meter: Any = None

# Latest ElectionMetrics per group id, read by the gauge callbacks
_gauge_sources: dict[str, weakref.ref[ElectionMetrics]] = {}


def _get_meter() -> Any:
    """Return the "groupelect" meter, or None without OpenTelemetry."""
    global _meter
    if _meter is None and OTEL_METRICS_AVAILABLE and metrics is not None:
        _meter = metrics.get_meter("groupelect", version="1.0.0")
    return _meter


def reset_meter() -> None:
    """Forget the cached meter and gauge sources so the next ElectionMetrics starts clean."""
    global _meter, _gauge_meter
    _meter = None
    _gauge_meter = None
    _gauge_sources.clear()


def _live_gauge_sources() -> Iterator[tuple[str, ElectionMetrics]]:
    for group_id, ref in list(_gauge_sources.items()):
        source = ref()
        if source is None:
            if _gauge_sources.get(group_id) is ref:
                del _gauge_sources[group_id]
            continue
        yield group_id, source


def _observe_epoch(options: Any) -> Any:
    from opentelemetry.metrics import Observation

    for group_id, source in _live_gauge_sources():
        yield Observation(value=source._snapshot.epoch, attributes={"group": group_id})


def _observe_is_primary(options: Any) -> Any:
    from opentelemetry.metrics import Observation

    for group_id, source in _live_gauge_sources():
        yield Observation(
            value=1 if source._snapshot.is_primary else 0,
            attributes={"group": group_id},
        )


def _register_gauges(meter: Any) -> None:
    global _gauge_meter
    if _gauge_meter is meter:
        return
    meter.create_observable_gauge(
        name="election.epoch",
        callbacks=[_observe_epoch],
        unit="1",
        description="Epoch of the last completed election round",
    )
    meter.create_observable_gauge(
        name="election.is_primary",
        callbacks=[_observe_is_primary],
        unit="1",
        description="1 if this node is the elected primary, else 0",
    )
    _gauge_meter = meter


class NoOpCounter:
    """No-op counter used when OpenTelemetry is not available."""

    def add(
        self,
        amount: int | float,
        attributes: dict[str, Any] | None = None,
    ) -> None:
        pass


class NoOpHistogram:
    """No-op histogram used when OpenTelemetry is not available."""

    def record(
        self,
        value: int | float,
        attributes: dict[str, Any] | None = None,
    ) -> None:
        pass


@dataclass
class MetricSnapshot:
    """
    Snapshot of the values recorded by ElectionMetrics.

    Attributes:
        rounds_computed: Rounds computed while round leader
        rounds_completed: Outcomes delivered to the listener
        rounds_failed: Delivered outcomes with a failed status
        decode_failures: Identity or assignment payloads that failed to decode
        revocations: Assignments revoked ahead of a rebalance
        epoch: Epoch of the last completed round
        is_primary: Whether this node was primary in the last round
        last_round_members: Members submitted in the last computed round
        last_round_excluded: Members excluded from the last computed round
    """

    rounds_computed: int = 0
    rounds_completed: int = 0
    rounds_failed: int = 0
    decode_failures: int = 0
    revocations: int = 0
    epoch: int = NO_EPOCH
    is_primary: bool = False
    last_round_members: int = 0
    last_round_excluded: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "rounds_computed": self.rounds_computed,
            "rounds_completed": self.rounds_completed,
            "rounds_failed": self.rounds_failed,
            "decode_failures": self.decode_failures,
            "revocations": self.revocations,
            "epoch": self.epoch,
            "is_primary": self.is_primary,
            "last_round_members": self.last_round_members,
            "last_round_excluded": self.last_round_excluded,
        }


@dataclass
class ElectionMetrics:
    """
    Container for election metric instruments.

    All methods are safe to call even when OpenTelemetry is not
    installed - they become no-ops apart from the in-process snapshot.

    Attributes:
        group_id: Membership group used as the 'group' metric attribute
        enable_metrics: Create OpenTelemetry instruments (default True)
    """

    group_id: str
    enable_metrics: bool = True

    _meter: Any = field(default=None, init=False, repr=False)
    _rounds_computed_counter: Any = field(default=None, init=False, repr=False)
    _rounds_completed_counter: Any = field(default=None, init=False, repr=False)
    _decode_failures_counter: Any = field(default=None, init=False, repr=False)
    _revocations_counter: Any = field(default=None, init=False, repr=False)
    _round_members_histogram: Any = field(default=None, init=False, repr=False)

    _snapshot: MetricSnapshot = field(default_factory=MetricSnapshot, init=False, repr=False)

    def __post_init__(self) -> None:
        if self.enable_metrics and OTEL_METRICS_AVAILABLE:
            self._setup_metrics()
        else:
            self._setup_noop()

    def _setup_metrics(self) -> None:
        self._meter = _get_meter()

        if self._meter is None:
            self._setup_noop()
            return

        self._rounds_computed_counter = self._meter.create_counter(
            name="election.rounds.computed",
            unit="rounds",
            description="Election rounds computed while acting as round leader",
        )
        self._rounds_completed_counter = self._meter.create_counter(
            name="election.rounds.completed",
            unit="rounds",
            description="Election outcomes delivered to the rebalance listener",
        )
        self._decode_failures_counter = self._meter.create_counter(
            name="election.decode.failures",
            unit="payloads",
            description="Identity or assignment payloads that failed to decode",
        )
        self._revocations_counter = self._meter.create_counter(
            name="election.revocations",
            unit="revocations",
            description="Assignments revoked ahead of a rebalance",
        )
        self._round_members_histogram = self._meter.create_histogram(
            name="election.round.members",
            unit="members",
            description="Members whose metadata was submitted to a computed round",
        )

        _register_gauges(self._meter)
        _gauge_sources[self.group_id] = weakref.ref(self)

    def _setup_noop(self) -> None:
        self._rounds_computed_counter = NoOpCounter()
        self._rounds_completed_counter = NoOpCounter()
        self._decode_failures_counter = NoOpCounter()
        self._revocations_counter = NoOpCounter()
        self._round_members_histogram = NoOpHistogram()

    def record_round_computed(self, member_count: int, excluded_count: int) -> None:
        """
        Record a round computed while acting as round leader.

        Args:
            member_count: Members whose metadata was submitted
            excluded_count: Members excluded because their metadata was unreadable
        """
        attributes = {"group": self.group_id}
        self._rounds_computed_counter.add(1, attributes)
        self._round_members_histogram.record(member_count, attributes)
        self._snapshot.rounds_computed += 1
        self._snapshot.last_round_members = member_count
        self._snapshot.last_round_excluded = excluded_count

    def record_round_completed(self, status: str, epoch: int, is_primary: bool) -> None:
        """
        Record an outcome delivered to the listener.

        Args:
            status: Outcome status name (e.g., "OK", "DUPLICATE_ADDRESS")
            epoch: Epoch of the completed round
            is_primary: Whether this node was elected primary
        """
        self._rounds_completed_counter.add(1, {"group": self.group_id, "status": status})
        self._snapshot.rounds_completed += 1
        if status != "OK":
            self._snapshot.rounds_failed += 1
        self._snapshot.epoch = epoch
        self._snapshot.is_primary = is_primary

    def record_decode_failure(self, payload: str) -> None:
        """
        Record a payload that failed to decode.

        Args:
            payload: Payload kind ("identity" or "assignment")
        """
        self._decode_failures_counter.add(1, {"group": self.group_id, "payload": payload})
        self._snapshot.decode_failures += 1

    def record_revoked(self) -> None:
        """Record an assignment revoked ahead of a rebalance."""
        self._revocations_counter.add(1, {"group": self.group_id})
        self._snapshot.revocations += 1
        self._snapshot.is_primary = False

    def get_snapshot(self) -> MetricSnapshot:
        """Get a copy of the current metric values."""
        return MetricSnapshot(**self._snapshot.to_dict())

    @property
    def metrics_enabled(self) -> bool:
        """True if metrics are enabled and OTel is available."""
        return self.enable_metrics and OTEL_METRICS_AVAILABLE


__all__ = [
    "OTEL_METRICS_AVAILABLE",
    "ElectionMetrics",
    "MetricSnapshot",
    "NoOpCounter",
    "NoOpHistogram",
    "reset_meter",
]
