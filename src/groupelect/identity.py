"""
Node identity advertised during group join.

Every participating node submits an Identity describing where it can be
reached and whether it may act as primary. The round leader collects all
identities and runs the election over them.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from groupelect.types import Address


class Identity(BaseModel):
    """
    Reachable address plus primary eligibility of a single node.

    Identities are immutable and compare structurally on
    (host, port, eligible). A fresh instance is built every time a node
    submits its join metadata.

    Attributes:
        host: Hostname or IP other nodes use to reach this node
        port: Port other nodes use to reach this node
        eligible: Whether this node may be elected primary

    Example:
        >>> identity = Identity(host="registry-1", port=8081, eligible=True)
        >>> identity.address
        ('registry-1', 8081)
        >>> identity.url()
        'http://registry-1:8081'
    """

    model_config = ConfigDict(frozen=True, strict=True)

    host: str = Field(
        ...,
        min_length=1,
        description="Hostname or IP address other nodes use to reach this node",
    )
    port: int = Field(
        ...,
        ge=1,
        le=65535,
        description="Port other nodes use to reach this node",
    )
    eligible: bool = Field(
        ...,
        description="Whether this node may act as primary",
    )

    @property
    def address(self) -> Address:
        """The (host, port) pair used for duplicate address detection."""
        return (self.host, self.port)

    def url(self, scheme: str = "http") -> str:
        """Render the identity as a URL, e.g. ``http://host:8081``."""
        return f"{scheme}://{self.host}:{self.port}"

    def __str__(self) -> str:
        suffix = "" if self.eligible else " (ineligible)"
        return f"{self.host}:{self.port}{suffix}"
