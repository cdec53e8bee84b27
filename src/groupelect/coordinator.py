"""
Election coordinator: one session object per node.

The coordinator plugs the identity codec, assignment codec and election
algorithm into the hooks of an external group membership engine, tracks
the current epoch and last outcome, and notifies the node's
RebalanceListener.

This module provides:
- CoordinatorState: Enum of coordinator states
- VALID_TRANSITIONS / is_valid_transition: The coordinator state machine
- ElectionStatus: Immutable snapshot for health checks
- ElectionCoordinator: The GroupProtocolHandler implementation

State Machine:
    JOINING -> LEADING | FOLLOWING
    LEADING -> SYNCED | JOINING
    FOLLOWING -> SYNCED | JOINING
    SYNCED -> ACTIVE | JOINING
    ACTIVE -> REVOKING
    REVOKING -> JOINING

The engine calls the hooks one at a time from its own loop, so the
coordinator holds no locks and performs no I/O.

Example:
    >>> config = ElectionConfig(host="registry-1", port=8081)
    >>> coordinator = ElectionCoordinator(config, listener)
    >>> engine.register(coordinator)  # engine drives the hooks from here on
    >>> coordinator.status().is_primary
    True
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any

from groupelect.algorithm import elect_primary, find_duplicate_addresses
from groupelect.codec.assignment import AssignmentCodec
from groupelect.codec.identity import IdentityCodec
from groupelect.config import ElectionConfig
from groupelect.exceptions import CoordinatorStateError, ProtocolDecodeError
from groupelect.identity import Identity
from groupelect.metrics import ElectionMetrics
from groupelect.observability import Tracer, create_tracer
from groupelect.observability.attributes import (
    ATTR_COORDINATOR_STATE,
    ATTR_EPOCH,
    ATTR_EXCLUDED_COUNT,
    ATTR_GROUP_ID,
    ATTR_IS_PRIMARY,
    ATTR_LEADER_MEMBER_ID,
    ATTR_MEMBER_COUNT,
    ATTR_MEMBER_ID,
    ATTR_OUTCOME_STATUS,
    ATTR_PRIMARY_MEMBER_ID,
)
from groupelect.outcome import DuplicateAddress, Outcome
from groupelect.protocols import RebalanceListener
from groupelect.types import NO_EPOCH, Epoch, MemberAssignments, MemberId

logger = logging.getLogger(__name__)


class CoordinatorState(Enum):
    """
    States an election coordinator moves through each round.

    State transitions:
        JOINING -> LEADING | FOLLOWING
        LEADING -> SYNCED | JOINING
        FOLLOWING -> SYNCED | JOINING
        SYNCED -> ACTIVE | JOINING
        ACTIVE -> REVOKING
        REVOKING -> JOINING
    """

    JOINING = "joining"
    """Waiting for the membership engine to form the next round."""

    LEADING = "leading"
    """Designated round leader; computing the outcome."""

    FOLLOWING = "following"
    """Not the round leader; waiting for the broadcast outcome."""

    SYNCED = "synced"
    """Outcome received and decoded for this round."""

    ACTIVE = "active"
    """Listener notified; holding the assignment until told to rebalance."""

    REVOKING = "revoking"
    """Notifying the listener that the assignment is being revoked."""


VALID_TRANSITIONS: dict[CoordinatorState, set[CoordinatorState]] = {
    CoordinatorState.JOINING: {
        CoordinatorState.LEADING,
        CoordinatorState.FOLLOWING,
    },
    CoordinatorState.LEADING: {
        CoordinatorState.SYNCED,
        CoordinatorState.JOINING,  # Round aborted
    },
    CoordinatorState.FOLLOWING: {
        CoordinatorState.SYNCED,
        CoordinatorState.JOINING,  # Round aborted
    },
    CoordinatorState.SYNCED: {
        CoordinatorState.ACTIVE,
        CoordinatorState.JOINING,  # Undecodable or stale outcome
    },
    CoordinatorState.ACTIVE: {
        CoordinatorState.REVOKING,
    },
    CoordinatorState.REVOKING: {
        CoordinatorState.JOINING,
    },
}

_IN_ROUND_STATES = frozenset(
    {CoordinatorState.LEADING, CoordinatorState.FOLLOWING, CoordinatorState.SYNCED}
)


def is_valid_transition(
    from_state: CoordinatorState,
    to_state: CoordinatorState,
) -> bool:
    """
    Check if a state transition is valid.

    Args:
        from_state: Current state
        to_state: Target state

    Returns:
        True if transition is allowed, False otherwise
    """
    return to_state in VALID_TRANSITIONS.get(from_state, set())


@dataclass(frozen=True)
class ElectionStatus:
    """
    Point-in-time view of one node's election state.

    Attributes:
        state: Current coordinator state
        epoch: Epoch of the last completed round (-1 before the first)
        member_id: Member id assigned in the last completed round
        is_primary: Whether this node is primary, None while rebalancing
        is_primary_eligible: Whether this node advertises itself as eligible
        primary_member_id: Member id of the last known primary
        primary_url: URL of the last known primary
        failed: Whether the last completed round failed
        rejoin_needed: Whether a new round has been requested
    """

    state: str
    epoch: int
    member_id: str | None
    is_primary: bool | None
    is_primary_eligible: bool
    primary_member_id: str | None
    primary_url: str | None
    failed: bool
    rejoin_needed: bool

    def to_dict(self) -> dict[str, Any]:
        return {
            "state": self.state,
            "epoch": self.epoch,
            "member_id": self.member_id,
            "is_primary": self.is_primary,
            "is_primary_eligible": self.is_primary_eligible,
            "primary_member_id": self.primary_member_id,
            "primary_url": self.primary_url,
            "failed": self.failed,
            "rejoin_needed": self.rejoin_needed,
        }


class ElectionCoordinator:
    """
    Per-node election session driven by a group membership engine.

    Implements the GroupProtocolHandler hooks:
    - sub_protocol_name / metadata: advertise this node's identity
    - compute_round_outcome: run the election when this node is round leader
    - on_round_complete: accept the broadcast outcome and notify the listener
    - on_revoked: notify the listener before the node rejoins
    - rejoin_needed: tell the engine a new round is required

    The coordinator owns the epoch and last outcome for its node only.
    Round input collected while leading is never retained past the hook
    call that computed it.

    Example:
        >>> coordinator = ElectionCoordinator(
        ...     ElectionConfig(host="registry-1", port=8081),
        ...     listener=my_listener,
        ... )
        >>> coordinator.sub_protocol_name()
        'elect-v0'
    """

    def __init__(
        self,
        config: ElectionConfig,
        listener: RebalanceListener,
        *,
        identity_codec: IdentityCodec | None = None,
        assignment_codec: AssignmentCodec | None = None,
        metrics: ElectionMetrics | None = None,
        tracer: Tracer | None = None,
        enable_tracing: bool = True,
        enable_metrics: bool = True,
    ) -> None:
        """
        Initialize the coordinator.

        Args:
            config: Node configuration advertised during join
            listener: Receives on_assigned / on_revoked notifications
            identity_codec: Codec for join metadata (default IdentityCodec)
            assignment_codec: Codec for broadcast outcomes (default AssignmentCodec)
            metrics: Optional metrics container. Created from config.group_id
                if not provided.
            tracer: Optional custom Tracer instance. If not provided, one is
                created based on enable_tracing setting.
            enable_tracing: Whether to enable OpenTelemetry tracing.
                Ignored if tracer is explicitly provided.
            enable_metrics: Whether to enable OpenTelemetry metrics.
                Ignored if metrics is explicitly provided.
        """
        self._config = config
        self._listener = listener
        self._identity_codec = identity_codec or IdentityCodec()
        self._assignment_codec = assignment_codec or AssignmentCodec(self._identity_codec)
        self._tracer = tracer or create_tracer(__name__, enable_tracing)
        self._metrics = metrics or ElectionMetrics(
            group_id=config.group_id,
            enable_metrics=enable_metrics,
        )

        self._state = CoordinatorState.JOINING
        self._epoch: Epoch = NO_EPOCH
        self._member_id: MemberId | None = None
        self._outcome: Outcome | None = None
        self._rejoin_needed = True

    # -------------------------------------------------------------------------
    # Read accessors
    # -------------------------------------------------------------------------

    @property
    def config(self) -> ElectionConfig:
        return self._config

    @property
    def metrics(self) -> ElectionMetrics:
        return self._metrics

    @property
    def state(self) -> CoordinatorState:
        return self._state

    @property
    def epoch(self) -> Epoch:
        """Epoch of the last completed round, NO_EPOCH before the first."""
        return self._epoch

    @property
    def member_id(self) -> MemberId | None:
        """Member id this node held in the last completed round."""
        return self._member_id

    @property
    def last_outcome(self) -> Outcome | None:
        """Outcome of the last completed round, None before the first."""
        return self._outcome

    @property
    def is_primary(self) -> bool | None:
        """
        Whether this node is the elected primary.

        Returns None while a rebalance is in progress, since the previous
        answer may already be stale.
        """
        if self._state is not CoordinatorState.ACTIVE or self._outcome is None:
            return None
        return self._outcome.is_primary(self._member_id)

    def status(self) -> ElectionStatus:
        """Get a point-in-time status snapshot."""
        outcome = self._outcome
        primary = outcome.primary_identity if outcome is not None else None
        return ElectionStatus(
            state=self._state.value,
            epoch=self._epoch,
            member_id=self._member_id,
            is_primary=self.is_primary,
            is_primary_eligible=self._config.primary_eligible,
            primary_member_id=outcome.primary_member_id if outcome is not None else None,
            primary_url=primary.url(self._config.scheme) if primary is not None else None,
            failed=outcome.failed() if outcome is not None else False,
            rejoin_needed=self._rejoin_needed,
        )

    # -------------------------------------------------------------------------
    # GroupProtocolHandler hooks
    # -------------------------------------------------------------------------

    def sub_protocol_name(self) -> str:
        return self._config.sub_protocol

    def metadata(self) -> bytes:
        """Encode a fresh identity for this join attempt."""
        identity = self._config.identity()
        logger.debug(
            "Submitting election metadata",
            extra={"group_id": self._config.group_id, "identity": str(identity)},
        )
        return self._identity_codec.encode(identity)

    def compute_round_outcome(
        self,
        epoch: Epoch,
        leader_member_id: MemberId,
        member_metadata: Mapping[MemberId, bytes],
    ) -> MemberAssignments:
        """
        Run the election as round leader and encode the outcome for every member.

        Members whose metadata cannot be decoded are excluded from the
        election but still receive the broadcast outcome.

        Args:
            epoch: Epoch of the round being computed
            leader_member_id: Member id of this node for the round
            member_metadata: Member id to submitted metadata for every member

        Returns:
            Member id to encoded outcome; the same payload for every member

        Raises:
            CoordinatorStateError: If called while holding an unrevoked assignment
        """
        with self._tracer.span(
            "groupelect.coordinator.compute_round_outcome",
            {
                ATTR_GROUP_ID: self._config.group_id,
                ATTR_EPOCH: epoch,
                ATTR_LEADER_MEMBER_ID: leader_member_id,
                ATTR_MEMBER_COUNT: len(member_metadata),
            },
        ) as span:
            if self._state in _IN_ROUND_STATES:
                self._abandon_round("superseded by a new round")
            self._transition(CoordinatorState.LEADING)

            round_input: dict[MemberId, Identity] = {}
            excluded: list[MemberId] = []
            for member_id, raw in member_metadata.items():
                try:
                    round_input[member_id] = self._identity_codec.decode(raw)
                except ProtocolDecodeError as e:
                    excluded.append(member_id)
                    self._metrics.record_decode_failure(e.payload)
                    logger.warning(
                        "Excluding member with unreadable election metadata",
                        extra={
                            "group_id": self._config.group_id,
                            "epoch": epoch,
                            "member_id": member_id,
                            "error": e.reason,
                        },
                    )

            outcome = elect_primary(round_input, leader_member_id)

            if isinstance(outcome, DuplicateAddress):
                duplicates = find_duplicate_addresses(round_input)
                logger.error(
                    "Election failed: members advertise duplicate addresses",
                    extra={
                        "group_id": self._config.group_id,
                        "epoch": epoch,
                        "duplicates": {
                            f"{host}:{port}": member_ids
                            for (host, port), member_ids in duplicates.items()
                        },
                    },
                )
            else:
                logger.info(
                    "Computed election outcome",
                    extra={
                        "group_id": self._config.group_id,
                        "epoch": epoch,
                        "leader_member_id": leader_member_id,
                        "primary_member_id": outcome.primary_member_id,
                        "members": len(member_metadata),
                        "excluded": len(excluded),
                    },
                )

            if span:
                span.set_attribute(ATTR_OUTCOME_STATUS, outcome.status.name)
                span.set_attribute(ATTR_EXCLUDED_COUNT, len(excluded))

            self._metrics.record_round_computed(len(member_metadata), len(excluded))

            encoded = self._assignment_codec.encode(outcome)
            return {member_id: encoded for member_id in member_metadata}

    def on_round_complete(
        self,
        epoch: Epoch,
        member_id: MemberId,
        outcome_bytes: bytes,
    ) -> None:
        """
        Accept the outcome delivered for this round and notify the listener.

        An undecodable outcome or an epoch that does not advance aborts the
        round: the listener is not called and a rejoin is requested.

        Epochs are compared across the whole life of this object, including
        rounds held under a different member id. If the same coordinator is
        moved to a group whose epochs restarted, every outcome is rejected
        as stale until the new group's epoch passes the last one accepted
        here, while the other members may already treat this node as
        primary. Build a new coordinator when switching groups.

        Args:
            epoch: Epoch of the completed round
            member_id: Member id of this node for the round
            outcome_bytes: Encoded outcome broadcast by the round leader

        Raises:
            CoordinatorStateError: If called while holding an unrevoked assignment
        """
        with self._tracer.span(
            "groupelect.coordinator.on_round_complete",
            {
                ATTR_GROUP_ID: self._config.group_id,
                ATTR_EPOCH: epoch,
                ATTR_MEMBER_ID: member_id,
            },
        ) as span:
            if self._state is CoordinatorState.JOINING:
                self._transition(CoordinatorState.FOLLOWING)
            self._transition(CoordinatorState.SYNCED)

            try:
                outcome = self._assignment_codec.decode(outcome_bytes)
            except ProtocolDecodeError as e:
                self._metrics.record_decode_failure(e.payload)
                logger.error(
                    "Discarding undecodable election outcome",
                    extra={
                        "group_id": self._config.group_id,
                        "epoch": epoch,
                        "member_id": member_id,
                        "error": e.reason,
                    },
                )
                self._abandon_round("undecodable outcome")
                return

            if epoch <= self._epoch:
                logger.warning(
                    "Discarding election outcome for stale epoch",
                    extra={
                        "group_id": self._config.group_id,
                        "epoch": epoch,
                        "last_epoch": self._epoch,
                        "member_id": member_id,
                    },
                )
                self._abandon_round("stale epoch")
                return

            self._epoch = epoch
            self._member_id = member_id
            self._outcome = outcome
            self._rejoin_needed = False

            is_primary = outcome.is_primary(member_id)
            if span:
                span.set_attribute(ATTR_OUTCOME_STATUS, outcome.status.name)
                span.set_attribute(ATTR_IS_PRIMARY, is_primary)
                if outcome.primary_member_id is not None:
                    span.set_attribute(ATTR_PRIMARY_MEMBER_ID, outcome.primary_member_id)

            self._metrics.record_round_completed(outcome.status.name, epoch, is_primary)
            logger.info(
                "Election round complete",
                extra={
                    "group_id": self._config.group_id,
                    "epoch": epoch,
                    "member_id": member_id,
                    "status": outcome.status.name,
                    "primary_member_id": outcome.primary_member_id,
                    "is_primary": is_primary,
                },
            )

            try:
                self._listener.on_assigned(outcome, epoch)
            except Exception as e:
                logger.error(
                    "Rebalance listener failed in on_assigned",
                    extra={
                        "group_id": self._config.group_id,
                        "epoch": epoch,
                        "error": str(e),
                    },
                    exc_info=True,
                )

            self._transition(CoordinatorState.ACTIVE)

    def on_revoked(self) -> None:
        """
        Leave the current round ahead of a rebalance.

        From ACTIVE the listener's on_revoked is invoked exactly once. From
        LEADING or FOLLOWING the partial round is discarded without notifying
        the listener, since nothing was assigned yet. While SYNCED the call
        can only come from the listener's own on_assigned; the node still
        becomes ACTIVE and a rejoin is requested, so the revoke happens on
        the next rebalance.
        """
        if self._state is CoordinatorState.REVOKING:
            # Re-entrant call from the listener; the outer call finishes the revoke
            return

        if self._state is CoordinatorState.SYNCED:
            # Called from inside on_assigned; revoked on the next rebalance
            logger.info(
                "Deferring revoke requested during assignment",
                extra={"group_id": self._config.group_id, "epoch": self._epoch},
            )
            self._rejoin_needed = True
            return

        with self._tracer.span(
            "groupelect.coordinator.on_revoked",
            {
                ATTR_GROUP_ID: self._config.group_id,
                ATTR_EPOCH: self._epoch,
                ATTR_COORDINATOR_STATE: self._state.value,
            },
        ):
            self._rejoin_needed = True

            if self._state in _IN_ROUND_STATES:
                self._abandon_round("revoked mid-round")
                return

            if self._state is not CoordinatorState.ACTIVE:
                return

            self._transition(CoordinatorState.REVOKING)
            self._metrics.record_revoked()
            logger.info(
                "Revoking election assignment",
                extra={
                    "group_id": self._config.group_id,
                    "epoch": self._epoch,
                    "member_id": self._member_id,
                },
            )

            try:
                self._listener.on_revoked()
            except Exception as e:
                logger.error(
                    "Rebalance listener failed in on_revoked",
                    extra={
                        "group_id": self._config.group_id,
                        "epoch": self._epoch,
                        "error": str(e),
                    },
                    exc_info=True,
                )

            self._transition(CoordinatorState.JOINING)

    def rejoin_needed(self) -> bool:
        return self._rejoin_needed

    def request_rejoin(self, reason: str = "requested") -> None:
        """
        Ask the membership engine to start a new round.

        The engine notices through rejoin_needed() and calls on_revoked
        before the node rejoins.
        """
        if not self._rejoin_needed:
            logger.info(
                "Requesting election rejoin",
                extra={"group_id": self._config.group_id, "reason": reason},
            )
        self._rejoin_needed = True

    # -------------------------------------------------------------------------
    # Internal helpers
    # -------------------------------------------------------------------------

    def _transition(self, to_state: CoordinatorState) -> None:
        if not is_valid_transition(self._state, to_state):
            raise CoordinatorStateError(self._state, to_state)
        logger.debug(
            "Coordinator state transition",
            extra={
                "group_id": self._config.group_id,
                "from_state": self._state.value,
                "to_state": to_state.value,
            },
        )
        self._state = to_state

    def _abandon_round(self, reason: str) -> None:
        """Drop the in-progress round and wait for the engine to rejoin."""
        logger.info(
            "Abandoning election round",
            extra={
                "group_id": self._config.group_id,
                "state": self._state.value,
                "reason": reason,
            },
        )
        self._rejoin_needed = True
        self._transition(CoordinatorState.JOINING)


__all__ = [
    "VALID_TRANSITIONS",
    "CoordinatorState",
    "ElectionCoordinator",
    "ElectionStatus",
    "is_valid_transition",
]
