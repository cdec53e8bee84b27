"""Library exceptions for the groupelect package."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from groupelect.coordinator import CoordinatorState


class GroupElectError(Exception):
    """Base exception for groupelect library."""

    pass


class ProtocolDecodeError(GroupElectError):
    """
    Raised when an Identity or Outcome payload cannot be decoded.

    Covers truncated input, unsupported version tags, malformed length
    fields and values that fail validation once decoded.

    Attributes:
        payload: Which payload failed ("identity" or "assignment")
        reason: Human readable description of the failure
    """

    def __init__(self, payload: str, reason: str) -> None:
        self.payload = payload
        self.reason = reason
        super().__init__(f"Failed to decode {payload} payload: {reason}")


class CoordinatorStateError(GroupElectError):
    """Raised when the membership engine drives an invalid state transition."""

    def __init__(self, from_state: CoordinatorState, to_state: CoordinatorState) -> None:
        self.from_state = from_state
        self.to_state = to_state
        super().__init__(
            f"Invalid coordinator transition from {from_state.value} to {to_state.value}"
        )
