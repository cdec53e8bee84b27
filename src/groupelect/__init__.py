"""
groupelect - Single-writer primary election over a group membership protocol.

This library provides:
- Identity and Outcome models for the election sub-protocol
- Versioned binary codecs for join metadata and sync assignments
- A deterministic election algorithm run by the round leader
- ElectionCoordinator, the per-node session plugged into a membership engine
- Optional OpenTelemetry tracing and metrics
"""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("groupelect-py")
except PackageNotFoundError:
    # Package not installed (running from source without install)
    __version__ = "0.0.0.dev0"

from groupelect.algorithm import elect_primary, find_duplicate_addresses
from groupelect.codec import (
    SUBPROTOCOL_V0,
    AssignmentCodec,
    IdentityCodec,
    decode_identity,
    decode_outcome,
    encode_identity,
    encode_outcome,
)
from groupelect.config import ElectionConfig
from groupelect.coordinator import (
    VALID_TRANSITIONS,
    CoordinatorState,
    ElectionCoordinator,
    ElectionStatus,
    is_valid_transition,
)
from groupelect.exceptions import (
    CoordinatorStateError,
    GroupElectError,
    ProtocolDecodeError,
)
from groupelect.identity import Identity
from groupelect.metrics import ElectionMetrics, MetricSnapshot
from groupelect.outcome import (
    DuplicateAddress,
    NoEligibleCandidate,
    Outcome,
    OutcomeStatus,
    PrimaryElected,
    outcome_from_fields,
)
from groupelect.protocols import GroupProtocolHandler, RebalanceListener
from groupelect.types import NO_EPOCH, Epoch, MemberId

__all__ = [
    "__version__",
    # Models
    "Identity",
    "Outcome",
    "OutcomeStatus",
    "PrimaryElected",
    "NoEligibleCandidate",
    "DuplicateAddress",
    "outcome_from_fields",
    # Codecs
    "SUBPROTOCOL_V0",
    "IdentityCodec",
    "AssignmentCodec",
    "encode_identity",
    "decode_identity",
    "encode_outcome",
    "decode_outcome",
    # Algorithm
    "elect_primary",
    "find_duplicate_addresses",
    # Coordinator
    "ElectionConfig",
    "ElectionCoordinator",
    "ElectionStatus",
    "CoordinatorState",
    "VALID_TRANSITIONS",
    "is_valid_transition",
    # Protocols
    "GroupProtocolHandler",
    "RebalanceListener",
    # Metrics
    "ElectionMetrics",
    "MetricSnapshot",
    # Exceptions
    "GroupElectError",
    "ProtocolDecodeError",
    "CoordinatorStateError",
    # Types
    "Epoch",
    "MemberId",
    "NO_EPOCH",
]
