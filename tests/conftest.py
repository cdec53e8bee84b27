"""
Shared pytest fixtures for the groupelect library tests.

This module provides:
- Identity fixtures (leader_identity, ineligible_identity)
- Config fixtures (leader_config)
- Coordinator fixtures (listener, coordinator)
- Membership engine fixtures (engine, make_node)
- OpenTelemetry metrics fixtures (metric_reader)
"""

from __future__ import annotations

from collections.abc import Callable, Generator
from typing import Any

import pytest

import groupelect.metrics as metrics_module
from groupelect.codec import encode_identity
from groupelect.config import ElectionConfig
from groupelect.coordinator import ElectionCoordinator
from groupelect.identity import Identity
from groupelect.observability import MockTracer
from groupelect.testing import InMemoryGroupMembership, RecordingRebalanceListener

# ============================================================================
# OpenTelemetry Metrics Availability Check
# ============================================================================

OTEL_METRICS_AVAILABLE = False
try:
    from opentelemetry.sdk.metrics import MeterProvider
    from opentelemetry.sdk.metrics.export import InMemoryMetricReader

    OTEL_METRICS_AVAILABLE = True
except ImportError:
    MeterProvider = None  # type: ignore[assignment, misc]
    InMemoryMetricReader = None  # type: ignore[assignment, misc]


LEADER_HOST = "leaderHost"
LEADER_PORT = 8083


# ============================================================================
# Identity Fixtures
# ============================================================================


@pytest.fixture
def leader_identity() -> Identity:
    """Eligible identity advertised by the round leader."""
    return Identity(host=LEADER_HOST, port=LEADER_PORT, eligible=True)


@pytest.fixture
def ineligible_identity() -> Identity:
    """Same address as leader_identity but not eligible."""
    return Identity(host=LEADER_HOST, port=LEADER_PORT, eligible=False)


@pytest.fixture
def metadata_for() -> Callable[[dict[str, Identity]], dict[str, bytes]]:
    """Encode a member id -> Identity map into join metadata."""

    def _encode(identities: dict[str, Identity]) -> dict[str, bytes]:
        return {member_id: encode_identity(identity) for member_id, identity in identities.items()}

    return _encode


# ============================================================================
# Coordinator Fixtures
# ============================================================================


@pytest.fixture
def leader_config() -> ElectionConfig:
    """Config of an eligible node."""
    return ElectionConfig(host=LEADER_HOST, port=LEADER_PORT, group_id="test-group")


@pytest.fixture
def listener() -> RecordingRebalanceListener:
    """Fresh recording listener."""
    return RecordingRebalanceListener()


@pytest.fixture
def tracer() -> MockTracer:
    """Tracer that records span names."""
    return MockTracer()


@pytest.fixture
def coordinator(
    leader_config: ElectionConfig,
    listener: RecordingRebalanceListener,
    tracer: MockTracer,
) -> ElectionCoordinator:
    """Coordinator for an eligible node with metrics disabled."""
    return ElectionCoordinator(
        leader_config,
        listener,
        tracer=tracer,
        enable_metrics=False,
    )


@pytest.fixture
def engine() -> InMemoryGroupMembership:
    """Empty in-memory membership engine."""
    return InMemoryGroupMembership(group_id="test-group")


@pytest.fixture
def make_node(
    engine: InMemoryGroupMembership,
) -> Callable[..., tuple[str, ElectionCoordinator, RecordingRebalanceListener]]:
    """Create a coordinator, join it to the engine and return (member_id, coordinator, listener)."""

    def _make(
        host: str,
        port: int = 8081,
        eligible: bool = True,
        member_id: str | None = None,
    ) -> tuple[str, ElectionCoordinator, RecordingRebalanceListener]:
        node_listener = RecordingRebalanceListener()
        node = ElectionCoordinator(
            ElectionConfig(host=host, port=port, primary_eligible=eligible, group_id="test-group"),
            node_listener,
            enable_tracing=False,
            enable_metrics=False,
        )
        joined = engine.join(node, member_id=member_id)
        return joined, node, node_listener

    return _make


# ============================================================================
# OpenTelemetry Metrics Fixtures
# ============================================================================


@pytest.fixture
def metric_reader() -> Generator[Any, None, None]:
    """
    Provide an InMemoryMetricReader wired into groupelect.metrics.

    The module-level meter is replaced with one from a private provider so
    the global meter provider is never touched.
    """
    if not OTEL_METRICS_AVAILABLE:
        pytest.skip("opentelemetry-sdk not installed")

    metrics_module.reset_meter()
    reader = InMemoryMetricReader()
    provider = MeterProvider(metric_readers=[reader])
    metrics_module._meter = provider.get_meter("groupelect")

    yield reader

    metrics_module.reset_meter()
    provider.shutdown()
