"""
Election outcome for a single round.

The outcome is a tagged variant with three shapes:

- PrimaryElected: a primary was chosen (status OK)
- NoEligibleCandidate: nobody may act as primary (status OK, not a failure)
- DuplicateAddress: two members advertised the same address (failed round)

Because each shape carries exactly the fields it needs, an outcome with a
primary member id but no primary identity (or the other way round) cannot
be constructed. ``outcome_from_fields`` rebuilds the variant from the flat
representation used on the wire.

Example:
    >>> from groupelect.identity import Identity
    >>> outcome = PrimaryElected("member-1", Identity(host="a", port=1, eligible=True))
    >>> outcome.failed()
    False
    >>> outcome.is_primary("member-1")
    True
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, ClassVar

from groupelect.identity import Identity
from groupelect.types import MemberId


class OutcomeStatus(Enum):
    """
    Status of an election round.

    The enum values double as the status codes written by the
    assignment codec.
    """

    OK = 0
    """The round completed; there may or may not be a primary."""

    DUPLICATE_ADDRESS = 1
    """Two distinct members advertised the same reachable address."""


class _OutcomeBase:
    """Shared accessors for every outcome variant."""

    status: ClassVar[OutcomeStatus]

    @property
    def primary_member_id(self) -> MemberId | None:
        return None

    @property
    def primary_identity(self) -> Identity | None:
        return None

    @property
    def has_primary(self) -> bool:
        return self.primary_member_id is not None

    def failed(self) -> bool:
        """True if the round failed because of a configuration conflict."""
        return self.status is not OutcomeStatus.OK

    def is_primary(self, member_id: MemberId | None) -> bool:
        """Check whether ``member_id`` is the elected primary."""
        return member_id is not None and self.primary_member_id == member_id

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging and status reporting."""
        identity = self.primary_identity
        return {
            "status": self.status.name,
            "failed": self.failed(),
            "primary_member_id": self.primary_member_id,
            "primary_identity": identity.model_dump() if identity is not None else None,
        }


@dataclass(frozen=True)
class PrimaryElected(_OutcomeBase):
    """A primary was chosen for the round."""

    status: ClassVar[OutcomeStatus] = OutcomeStatus.OK

    member_id: MemberId
    identity: Identity

    @property
    def primary_member_id(self) -> MemberId:
        return self.member_id

    @property
    def primary_identity(self) -> Identity:
        return self.identity


@dataclass(frozen=True)
class NoEligibleCandidate(_OutcomeBase):
    """No participant is eligible to act as primary. Not a failure."""

    status: ClassVar[OutcomeStatus] = OutcomeStatus.OK


@dataclass(frozen=True)
class DuplicateAddress(_OutcomeBase):
    """Two or more members claimed the same address; the round failed."""

    status: ClassVar[OutcomeStatus] = OutcomeStatus.DUPLICATE_ADDRESS


Outcome = PrimaryElected | NoEligibleCandidate | DuplicateAddress
"""Result of one election round."""


def outcome_from_fields(
    status: OutcomeStatus,
    primary_member_id: MemberId | None,
    primary_identity: Identity | None,
) -> Outcome:
    """
    Build an outcome variant from its flat field representation.

    Args:
        status: Round status
        primary_member_id: Elected member id, or None
        primary_identity: Elected member identity, or None

    Returns:
        The matching outcome variant

    Raises:
        ValueError: If the fields violate the outcome invariants
    """
    if (primary_member_id is None) != (primary_identity is None):
        raise ValueError(
            "primary_member_id and primary_identity must both be present or both be absent"
        )

    if status is OutcomeStatus.DUPLICATE_ADDRESS:
        if primary_member_id is not None:
            raise ValueError("a DUPLICATE_ADDRESS outcome cannot name a primary")
        return DuplicateAddress()

    if primary_member_id is None or primary_identity is None:
        return NoEligibleCandidate()
    return PrimaryElected(primary_member_id, primary_identity)


__all__ = [
    "DuplicateAddress",
    "NoEligibleCandidate",
    "Outcome",
    "OutcomeStatus",
    "PrimaryElected",
    "outcome_from_fields",
]
