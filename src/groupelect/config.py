"""
Configuration for a node taking part in primary election.

This module provides:
- ElectionConfig: Per-node settings advertised during group join
"""

from __future__ import annotations

from dataclasses import dataclass

from groupelect.codec.identity import SUBPROTOCOL_V0
from groupelect.identity import Identity

SUPPORTED_SCHEMES = frozenset({"http", "https"})


@dataclass(frozen=True)
class ElectionConfig:
    """
    Configuration for an election coordinator.

    Attributes:
        host: Hostname or IP other nodes use to reach this node
        port: Port other nodes use to reach this node
        primary_eligible: Whether this node may be elected primary
        group_id: Membership group shared by every node of the cluster
        scheme: URL scheme used when reporting the primary address
        sub_protocol: Sub-protocol name advertised to the membership engine

    Example:
        >>> config = ElectionConfig(host="registry-1", port=8081)
        >>> config.identity()
        Identity(host='registry-1', port=8081, eligible=True)
        >>>
        >>> # A node that serves reads only
        >>> replica = ElectionConfig(host="registry-2", port=8081, primary_eligible=False)
    """

    host: str
    port: int

    primary_eligible: bool = True

    group_id: str = "groupelect"
    scheme: str = "http"
    sub_protocol: str = SUBPROTOCOL_V0

    def __post_init__(self) -> None:
        """Validate configuration values."""
        if not self.host:
            raise ValueError(
                "host must be a non-empty hostname or IP address that other nodes can reach."
            )

        if not 1 <= self.port <= 65535:
            raise ValueError(f"port must be between 1 and 65535, got {self.port}.")

        if not self.group_id:
            raise ValueError("group_id must be non-empty. Use the same value on every node.")

        if self.scheme not in SUPPORTED_SCHEMES:
            raise ValueError(
                f"scheme must be one of {sorted(SUPPORTED_SCHEMES)}, got {self.scheme!r}."
            )

        if not self.sub_protocol:
            raise ValueError(
                f"sub_protocol must be non-empty. Use {SUBPROTOCOL_V0!r} (default)."
            )

    def identity(self) -> Identity:
        """Build a fresh identity advertising this node."""
        return Identity(host=self.host, port=self.port, eligible=self.primary_eligible)
