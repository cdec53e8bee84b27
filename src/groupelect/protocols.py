"""
Capability interfaces between the election core and its collaborators.

Protocols:
- RebalanceListener: Consumer-facing callbacks delivered to the service
- GroupProtocolHandler: Hooks the external group membership engine drives

The membership engine (coordinator discovery, join/sync round trips,
heartbeats, session timeouts, retry/backoff) is not part of this library.
It owns a single event loop and calls the GroupProtocolHandler hooks one
at a time, never concurrently.

Example:
    >>> from groupelect.protocols import RebalanceListener
    >>>
    >>> class PrimaryTracker:
    ...     def on_assigned(self, outcome: Outcome, epoch: int) -> None:
    ...         self.primary = outcome.primary_identity
    ...
    ...     def on_revoked(self) -> None:
    ...         self.primary = None
    >>>
    >>> isinstance(PrimaryTracker(), RebalanceListener)
    True
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from groupelect.outcome import Outcome
    from groupelect.types import Epoch, MemberAssignments, MemberId, MemberMetadata


@runtime_checkable
class RebalanceListener(Protocol):
    """
    Protocol for receiving election results.

    Ordering guarantees:
    - on_assigned is called exactly once per completed round
    - on_revoked is called exactly once before the node rejoins after
      having been assigned, and always precedes the next on_assigned
    - epochs passed to on_assigned strictly increase
    """

    def on_assigned(self, outcome: Outcome, epoch: Epoch) -> None:
        """
        Handle the outcome of a completed round.

        Args:
            outcome: Election outcome shared by every member of the round
            epoch: Epoch of the round
        """
        ...

    def on_revoked(self) -> None:
        """Handle loss of the current assignment ahead of a rebalance."""
        ...


@runtime_checkable
class GroupProtocolHandler(Protocol):
    """
    Protocol implemented by the election core for the membership engine.

    The engine calls these hooks synchronously from its own loop.
    """

    def sub_protocol_name(self) -> str:
        """Name selecting this election protocol among the group's protocols."""
        ...

    def metadata(self) -> bytes:
        """Encoded identity of this node, requested once per join attempt."""
        ...

    def compute_round_outcome(
        self,
        epoch: Epoch,
        leader_member_id: MemberId,
        member_metadata: MemberMetadata,
    ) -> MemberAssignments:
        """
        Run the election on the round leader.

        Args:
            epoch: Epoch of the round being computed
            leader_member_id: Member id of this node for the round
            member_metadata: Member id to submitted metadata for every member

        Returns:
            Member id to encoded outcome, one entry per member
        """
        ...

    def on_round_complete(self, epoch: Epoch, member_id: MemberId, outcome_bytes: bytes) -> None:
        """
        Accept the outcome delivered to this node.

        Args:
            epoch: Epoch of the completed round
            member_id: Member id of this node for the round
            outcome_bytes: Encoded outcome broadcast by the round leader
        """
        ...

    def on_revoked(self) -> None:
        """Called before this node leaves its current round for any reason."""
        ...

    def rejoin_needed(self) -> bool:
        """Whether this node needs the engine to start a new round."""
        ...


__all__ = ["GroupProtocolHandler", "RebalanceListener"]
