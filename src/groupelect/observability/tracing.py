"""
OpenTelemetry availability detection for groupelect.

OpenTelemetry is an optional dependency. This module is the single place
that attempts the import; everything else checks OTEL_AVAILABLE.
"""

# Optional OpenTelemetry import - single source of truth
try:
    from opentelemetry import trace  # noqa: F401

    OTEL_AVAILABLE = True
except ImportError:
    OTEL_AVAILABLE = False

__all__ = ["OTEL_AVAILABLE"]
