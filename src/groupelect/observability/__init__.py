"""
Observability utilities for groupelect.

This module provides tracing and standard attribute definitions for the
election coordinator. OpenTelemetry is an optional dependency; every
utility here degrades to a no-op when it is not installed.

Example:
    >>> from groupelect.observability import create_tracer
    >>>
    >>> class MyComponent:
    ...     def __init__(self, enable_tracing: bool = True):
    ...         self._tracer = create_tracer(__name__, enable_tracing)
"""

from groupelect.observability.attributes import (
    ATTR_COORDINATOR_STATE,
    ATTR_EPOCH,
    ATTR_ERROR_TYPE,
    ATTR_EXCLUDED_COUNT,
    ATTR_GROUP_ID,
    ATTR_IS_PRIMARY,
    ATTR_LEADER_MEMBER_ID,
    ATTR_MEMBER_COUNT,
    ATTR_MEMBER_ID,
    ATTR_OUTCOME_STATUS,
    ATTR_PRIMARY_MEMBER_ID,
    ATTR_SUB_PROTOCOL,
)
from groupelect.observability.tracer import (
    MockTracer,
    NullTracer,
    OpenTelemetryTracer,
    RecordedSpan,
    Tracer,
    create_tracer,
)
from groupelect.observability.tracing import OTEL_AVAILABLE

__all__ = [
    "OTEL_AVAILABLE",
    "MockTracer",
    "NullTracer",
    "OpenTelemetryTracer",
    "RecordedSpan",
    "Tracer",
    "create_tracer",
    "ATTR_COORDINATOR_STATE",
    "ATTR_EPOCH",
    "ATTR_ERROR_TYPE",
    "ATTR_EXCLUDED_COUNT",
    "ATTR_GROUP_ID",
    "ATTR_IS_PRIMARY",
    "ATTR_LEADER_MEMBER_ID",
    "ATTR_MEMBER_COUNT",
    "ATTR_MEMBER_ID",
    "ATTR_OUTCOME_STATUS",
    "ATTR_PRIMARY_MEMBER_ID",
    "ATTR_SUB_PROTOCOL",
]
