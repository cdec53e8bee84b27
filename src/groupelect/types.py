"""Common type definitions for the groupelect library."""

from collections.abc import Mapping

# Opaque member identifier assigned by the membership engine
MemberId = str

# Round counter assigned by the membership engine
Epoch = int

# Reachable address advertised by a node
Address = tuple[str, int]

# Raw payloads exchanged through the membership engine
MemberMetadata = Mapping[MemberId, bytes]
MemberAssignments = dict[MemberId, bytes]

# Epoch value before the first completed round
NO_EPOCH: Epoch = -1
