"""
Identity codec: the join metadata each node submits to the membership engine.

Wire format (version 0, big-endian)::

    int16  version
    int16  host length, followed by the UTF-8 host
    int32  port
    int8   eligible (0 or 1)
"""

from __future__ import annotations

from pydantic import ValidationError

from groupelect.codec._wire import WireReader, WireWriter
from groupelect.identity import Identity

SUBPROTOCOL_V0 = "elect-v0"
"""Sub-protocol name advertised to the membership engine."""

IDENTITY_V0 = 0
CURRENT_VERSION = IDENTITY_V0
SUPPORTED_VERSIONS = frozenset({IDENTITY_V0})

PAYLOAD = "identity"


class IdentityCodec:
    """
    Serializes Identity values to and from join metadata.

    Example:
        >>> codec = IdentityCodec()
        >>> data = codec.encode(Identity(host="registry-1", port=8081, eligible=True))
        >>> codec.decode(data)
        Identity(host='registry-1', port=8081, eligible=True)
    """

    sub_protocol_name = SUBPROTOCOL_V0
    version = CURRENT_VERSION

    def encode(self, identity: Identity) -> bytes:
        """Encode an identity into the current wire version."""
        return (
            WireWriter()
            .int16(self.version)
            .string(identity.host)
            .int32(identity.port)
            .flag(identity.eligible)
            .getvalue()
        )

    def decode(self, data: bytes) -> Identity:
        """
        Decode an identity payload.

        Raises:
            ProtocolDecodeError: If the payload is truncated, carries an
                unsupported version, has malformed length fields or does not
                describe a valid identity.
        """
        reader = WireReader(data, PAYLOAD)
        version = reader.int16("version")
        if version not in SUPPORTED_VERSIONS:
            raise reader.error(f"unsupported version {version}")

        host = reader.string("host")
        port = reader.int32("port")
        eligible = reader.flag("eligible")
        reader.finish()

        try:
            return Identity(host=host, port=port, eligible=eligible)
        except ValidationError as e:
            raise reader.error(f"invalid identity: {e.errors()[0]['msg']}") from e


_default_codec = IdentityCodec()


def encode_identity(identity: Identity) -> bytes:
    """Encode an identity with the default codec."""
    return _default_codec.encode(identity)


def decode_identity(data: bytes) -> Identity:
    """Decode an identity with the default codec."""
    return _default_codec.decode(data)
