"""
Basic Usage Example

This example demonstrates primary election across a small cluster:
- Configuring nodes and attaching a rebalance listener
- Running rounds through a membership engine
- Reacting to assignment and revocation
- Handing the primary role over when a node leaves

The in-memory membership engine stands in for a real group coordinator.

Run with: python examples/basic_usage.py
"""

import logging

from groupelect import ElectionConfig, ElectionCoordinator, Outcome
from groupelect.testing import InMemoryGroupMembership

# =============================================================================
# Step 1: Define a Rebalance Listener
# =============================================================================
# The listener is how the application learns whether it may accept writes.


class WriteGate:
    """Accepts writes only while this node is the elected primary."""

    def __init__(self, name: str) -> None:
        self.name = name
        self.member_id: str | None = None
        self.accepting_writes = False

    def on_assigned(self, outcome: Outcome, epoch: int) -> None:
        if outcome.failed():
            print(f"  [{self.name}] epoch {epoch}: election failed ({outcome.status.name})")
            self.accepting_writes = False
            return
        self.accepting_writes = outcome.is_primary(self.member_id)
        primary = outcome.primary_identity
        print(
            f"  [{self.name}] epoch {epoch}: primary is "
            f"{primary.url() if primary else 'nobody'}"
            f"{' (me)' if self.accepting_writes else ''}"
        )

    def on_revoked(self) -> None:
        self.accepting_writes = False
        print(f"  [{self.name}] revoked, writes paused")


# =============================================================================
# Step 2: Create Nodes
# =============================================================================


def create_node(
    engine: InMemoryGroupMembership,
    name: str,
    port: int,
    eligible: bool = True,
) -> tuple[ElectionCoordinator, WriteGate]:
    gate = WriteGate(name)
    coordinator = ElectionCoordinator(
        ElectionConfig(host=name, port=port, primary_eligible=eligible, group_id="registry"),
        gate,
    )
    gate.member_id = engine.join(coordinator)
    return coordinator, gate


# =============================================================================
# Step 3: Run Rounds
# =============================================================================


def main() -> None:
    logging.basicConfig(level=logging.WARNING)
    engine = InMemoryGroupMembership(group_id="registry")

    print("Joining three nodes (one read-only replica)...")
    _, first_gate = create_node(engine, "registry-1", 8081)
    second, second_gate = create_node(engine, "registry-2", 8081)
    create_node(engine, "replica-1", 8081, eligible=False)

    print("\nRound 1:")
    engine.rebalance()
    assert first_gate.accepting_writes
    assert not second_gate.accepting_writes

    print("\nregistry-1 leaves; round 2:")
    engine.leave(first_gate.member_id)
    engine.rebalance()
    assert second_gate.accepting_writes

    print("\nStatus of registry-2:")
    for key, value in second.status().to_dict().items():
        print(f"  {key}: {value}")


if __name__ == "__main__":
    main()
