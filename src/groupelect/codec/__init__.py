"""
Wire codecs for the election sub-protocol.

This module provides:
- IdentityCodec: join metadata each node submits
- AssignmentCodec: the outcome the round leader broadcasts

Both formats start with an int16 version tag so newer participants can
extend them without breaking older ones mid-rollout.

Example:
    >>> from groupelect.codec import decode_identity, encode_identity
    >>> data = encode_identity(Identity(host="registry-1", port=8081, eligible=True))
    >>> decode_identity(data).host
    'registry-1'
"""

from groupelect.codec.assignment import (
    AssignmentCodec,
    decode_outcome,
    encode_outcome,
)
from groupelect.codec.identity import (
    SUBPROTOCOL_V0,
    IdentityCodec,
    decode_identity,
    encode_identity,
)

__all__ = [
    "SUBPROTOCOL_V0",
    "AssignmentCodec",
    "IdentityCodec",
    "decode_identity",
    "decode_outcome",
    "encode_identity",
    "encode_outcome",
]
