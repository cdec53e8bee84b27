"""
Integration tests for election rounds driven by the in-memory membership engine.

Every node is a real ElectionCoordinator; only the membership engine is
simulated. The tests follow full join / sync / revoke cycles across
several rounds.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable

import pytest

from groupelect.config import ElectionConfig
from groupelect.coordinator import CoordinatorState, ElectionCoordinator
from groupelect.identity import Identity
from groupelect.outcome import DuplicateAddress, NoEligibleCandidate, Outcome, PrimaryElected
from groupelect.testing import InMemoryGroupMembership, RecordingRebalanceListener

pytestmark = pytest.mark.integration

MakeNode = Callable[..., tuple[str, ElectionCoordinator, RecordingRebalanceListener]]


def primaries(nodes: Iterable[ElectionCoordinator]) -> list[ElectionCoordinator]:
    return [node for node in nodes if node.is_primary]


class TestSingleNode:
    """Scenarios A and B through the engine."""

    def test_eligible_node_becomes_primary(
        self, make_node: MakeNode, engine: InMemoryGroupMembership
    ) -> None:
        """A lone eligible node elects itself."""
        member_id, node, listener = make_node("leaderHost", 8083, member_id="leader")

        engine.rebalance()

        assert listener.last_outcome == PrimaryElected(
            "leader", Identity(host="leaderHost", port=8083, eligible=True)
        )
        assert node.is_primary is True
        assert node.state is CoordinatorState.ACTIVE

    def test_ineligible_node_runs_without_primary(
        self, make_node: MakeNode, engine: InMemoryGroupMembership
    ) -> None:
        """A lone ineligible node completes the round with no primary."""
        _, node, listener = make_node("leaderHost", 8083, eligible=False)

        engine.rebalance()

        assert listener.last_outcome == NoEligibleCandidate()
        assert listener.last_outcome.failed() is False
        assert node.is_primary is False


class TestMultipleNodes:
    """Rounds with several nodes."""

    def test_leader_and_follower_agree(
        self, make_node: MakeNode, engine: InMemoryGroupMembership
    ) -> None:
        """Scenario D: the follower learns the leader is primary."""
        _, leader, leader_listener = make_node("leaderHost", 8083, member_id="leader")
        _, follower, follower_listener = make_node("memberHost", 8084, member_id="member")

        engine.rebalance(leader_member_id="leader")

        assert leader_listener.last_outcome == follower_listener.last_outcome
        assert follower_listener.last_outcome.primary_member_id == "leader"
        assert leader.is_primary is True
        assert follower.is_primary is False

    def test_at_most_one_primary(
        self, make_node: MakeNode, engine: InMemoryGroupMembership
    ) -> None:
        """Exactly one of five eligible nodes is primary in every round."""
        nodes = [make_node(f"host-{i}")[1] for i in range(5)]

        for _ in range(3):
            engine.rebalance()
            assert len(primaries(nodes)) == 1

    def test_ineligible_leader_elects_smallest_eligible(
        self, make_node: MakeNode, engine: InMemoryGroupMembership
    ) -> None:
        """An ineligible round leader hands the role to the smallest eligible member id."""
        make_node("a", eligible=False, member_id="m-a")
        _, c, _ = make_node("c", member_id="m-c")
        _, b, _ = make_node("b", member_id="m-b")

        engine.rebalance(leader_member_id="m-a")

        assert b.is_primary is True
        assert c.is_primary is False

    def test_primary_stays_with_stable_leader(
        self, make_node: MakeNode, engine: InMemoryGroupMembership
    ) -> None:
        """A new member joining does not move the primary."""
        _, first, _ = make_node("a")
        make_node("b")

        engine.rebalance()
        make_node("c")
        engine.rebalance()

        assert first.is_primary is True

    def test_all_ineligible(self, make_node: MakeNode, engine: InMemoryGroupMembership) -> None:
        """A group with no eligible member has no primary."""
        listeners = [make_node(f"h{i}", eligible=False)[2] for i in range(3)]

        engine.rebalance()

        assert all(listener.last_outcome == NoEligibleCandidate() for listener in listeners)


class TestDuplicateAddress:
    """Scenario C through the engine."""

    def test_every_member_sees_failure(
        self, make_node: MakeNode, engine: InMemoryGroupMembership
    ) -> None:
        """Both conflicting members receive the failed outcome."""
        _, a, a_listener = make_node("leaderHost", 8083)
        _, b, b_listener = make_node("leaderHost", 8083, eligible=False)

        engine.rebalance()

        for listener in (a_listener, b_listener):
            assert listener.last_outcome == DuplicateAddress()
            assert listener.last_outcome.failed() is True
        assert a.is_primary is False
        assert b.is_primary is False

    def test_recovers_once_conflict_leaves(
        self, make_node: MakeNode, engine: InMemoryGroupMembership
    ) -> None:
        """The next round elects a primary after the conflicting member leaves."""
        make_node("leaderHost", 8083)
        conflict, _, _ = make_node("leaderHost", 8083)
        engine.rebalance()

        engine.leave(conflict)
        engine.rebalance()

        assert engine.handler("member-1").is_primary is True


class TestRoundLifecycle:
    """Ordering of notifications across rounds."""

    def test_one_assignment_per_round(
        self, make_node: MakeNode, engine: InMemoryGroupMembership
    ) -> None:
        """Each round delivers exactly one assignment."""
        _, _, listener = make_node("a")

        for _ in range(3):
            engine.rebalance()

        assert listener.assigned_count == 3
        assert listener.epochs == [1, 2, 3]

    def test_revoke_precedes_every_later_assignment(
        self, make_node: MakeNode, engine: InMemoryGroupMembership
    ) -> None:
        """A revoke separates consecutive assignments."""
        _, _, listener = make_node("a")

        engine.rebalance()
        engine.rebalance()

        assert listener.events == ["assigned", "revoked", "assigned"]

    def test_epochs_strictly_increase(
        self, make_node: MakeNode, engine: InMemoryGroupMembership
    ) -> None:
        """Delivered epochs never repeat or go backwards."""
        _, _, listener = make_node("a")
        make_node("b")

        for _ in range(4):
            engine.rebalance()

        assert listener.epochs == sorted(set(listener.epochs))

    def test_abort_before_sync_notifies_nobody(
        self, make_node: MakeNode, engine: InMemoryGroupMembership
    ) -> None:
        """An aborted round reaches no listener and the next poll retries."""
        _, leader, leader_listener = make_node("a")
        _, follower, follower_listener = make_node("b")

        engine.rebalance(abort_before_sync=True)

        assert leader_listener.events == []
        assert follower_listener.events == []
        assert leader.state is CoordinatorState.JOINING
        assert follower.state is CoordinatorState.JOINING

        engine.poll()

        assert leader_listener.epochs == [2]
        assert follower_listener.epochs == [2]

    def test_abort_after_active_round(
        self, make_node: MakeNode, engine: InMemoryGroupMembership
    ) -> None:
        """Aborting a later round still revokes the earlier assignment."""
        _, node, listener = make_node("a")
        engine.rebalance()

        engine.rebalance(abort_before_sync=True)

        assert listener.events == ["assigned", "revoked"]
        assert node.is_primary is None

    def test_leaving_primary_hands_over(
        self, make_node: MakeNode, engine: InMemoryGroupMembership
    ) -> None:
        """When the primary leaves, the remaining node takes over."""
        first, _, first_listener = make_node("a")
        _, second, _ = make_node("b")
        engine.rebalance()

        engine.leave(first)
        engine.rebalance()

        assert first_listener.events == ["assigned", "revoked"]
        assert second.is_primary is True

    def test_poll_is_idle_when_settled(
        self, make_node: MakeNode, engine: InMemoryGroupMembership
    ) -> None:
        """poll does nothing once every member is settled."""
        make_node("a")
        engine.poll()
        assert engine.poll() is None
        assert engine.epoch == 1

    def test_revoke_requested_during_assignment(self, engine: InMemoryGroupMembership) -> None:
        """A listener revoking inside on_assigned gets a fresh round on the next poll."""

        class RevokeOnceListener(RecordingRebalanceListener):
            coordinator: ElectionCoordinator | None = None
            revoke_requested: bool = False

            def on_assigned(self, outcome: Outcome, epoch: int) -> None:
                super().on_assigned(outcome, epoch)
                if not self.revoke_requested and self.coordinator is not None:
                    self.revoke_requested = True
                    self.coordinator.on_revoked()

        listener = RevokeOnceListener()
        node = ElectionCoordinator(
            ElectionConfig(host="a", port=8081, group_id="test-group"),
            listener,
            enable_tracing=False,
            enable_metrics=False,
        )
        listener.coordinator = node
        engine.join(node)

        engine.rebalance()

        assert node.state is CoordinatorState.ACTIVE
        assert node.rejoin_needed() is True

        assert engine.poll() is not None

        assert listener.events == ["assigned", "revoked", "assigned"]
        assert listener.epochs == [1, 2]
        assert node.rejoin_needed() is False


class TestCorruptPayloads:
    """Undecodable metadata and assignments injected by the engine."""

    def test_unreadable_metadata_excludes_member(
        self, make_node: MakeNode, engine: InMemoryGroupMembership
    ) -> None:
        """A member with unreadable metadata is excluded but still told the outcome."""
        _, leader, _ = make_node("a")
        broken, other, other_listener = make_node("b")
        engine.corrupt_metadata(broken, b"\x00\x01")

        engine.rebalance()

        assert leader.is_primary is True
        assert other.is_primary is False
        assert other_listener.last_outcome.primary_member_id == "member-1"

    def test_unreadable_leader_metadata_elects_someone_else(
        self, make_node: MakeNode, engine: InMemoryGroupMembership
    ) -> None:
        """An unreadable round leader cannot be elected."""
        leader_id, leader, _ = make_node("a")
        _, other, _ = make_node("b")
        engine.corrupt_metadata(leader_id, b"")

        engine.rebalance()

        assert leader.is_primary is False
        assert other.is_primary is True

    def test_unreadable_assignment_forces_rejoin(
        self, make_node: MakeNode, engine: InMemoryGroupMembership
    ) -> None:
        """A node that cannot read its assignment rejoins and recovers next round."""
        _, leader, leader_listener = make_node("a")
        broken, other, other_listener = make_node("b")
        engine.corrupt_assignment(broken, b"\xff")

        engine.rebalance()

        assert leader_listener.assigned_count == 1
        assert other_listener.assigned_count == 0
        assert other.rejoin_needed() is True

        engine.clear_corruption()
        record = engine.poll()

        assert record is not None
        assert other_listener.epochs == [2]
        assert len(primaries([leader, other])) == 1
