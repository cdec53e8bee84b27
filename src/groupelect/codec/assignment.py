"""
Assignment codec: the election outcome broadcast to every member.

Wire format (version 0, big-endian)::

    int16  version
    int16  status code (see OutcomeStatus)
    int8   has primary member id (0 or 1)
      int16  member id length, followed by the UTF-8 member id
    int8   has primary identity (0 or 1)
      int32  identity length, followed by an identity payload

The optional fields use a presence flag so that absence round-trips
exactly. The nested identity carries its own version tag.
"""

from __future__ import annotations

from groupelect.codec._wire import WireReader, WireWriter
from groupelect.codec.identity import IdentityCodec
from groupelect.exceptions import ProtocolDecodeError
from groupelect.identity import Identity
from groupelect.outcome import Outcome, OutcomeStatus, outcome_from_fields

ASSIGNMENT_V0 = 0
CURRENT_VERSION = ASSIGNMENT_V0
SUPPORTED_VERSIONS = frozenset({ASSIGNMENT_V0})

PAYLOAD = "assignment"


class AssignmentCodec:
    """
    Serializes election outcomes to and from sync payloads.

    Args:
        identity_codec: Codec for the nested primary identity

    Example:
        >>> codec = AssignmentCodec()
        >>> codec.decode(codec.encode(NoEligibleCandidate()))
        NoEligibleCandidate()
    """

    version = CURRENT_VERSION

    def __init__(self, identity_codec: IdentityCodec | None = None) -> None:
        self._identity_codec = identity_codec or IdentityCodec()

    def encode(self, outcome: Outcome) -> bytes:
        """Encode an outcome into the current wire version."""
        writer = WireWriter().int16(self.version).int16(outcome.status.value)

        member_id = outcome.primary_member_id
        writer.flag(member_id is not None)
        if member_id is not None:
            writer.string(member_id)

        identity = outcome.primary_identity
        writer.flag(identity is not None)
        if identity is not None:
            writer.blob(self._identity_codec.encode(identity))

        return writer.getvalue()

    def decode(self, data: bytes) -> Outcome:
        """
        Decode an outcome payload.

        Raises:
            ProtocolDecodeError: If the payload is truncated, carries an
                unsupported version or status code, has malformed length
                fields, or breaks the outcome invariants.
        """
        reader = WireReader(data, PAYLOAD)
        version = reader.int16("version")
        if version not in SUPPORTED_VERSIONS:
            raise reader.error(f"unsupported version {version}")

        code = reader.int16("status")
        try:
            status = OutcomeStatus(code)
        except ValueError as e:
            raise reader.error(f"unknown status code {code}") from e

        member_id: str | None = None
        if reader.flag("has_primary_member_id"):
            member_id = reader.string("primary_member_id")

        identity: Identity | None = None
        if reader.flag("has_primary_identity"):
            nested = reader.blob("primary_identity")
            try:
                identity = self._identity_codec.decode(nested)
            except ProtocolDecodeError as e:
                raise reader.error(f"invalid primary identity: {e.reason}") from e

        reader.finish()

        try:
            return outcome_from_fields(status, member_id, identity)
        except ValueError as e:
            raise reader.error(str(e)) from e


_default_codec = AssignmentCodec()


def encode_outcome(outcome: Outcome) -> bytes:
    """Encode an outcome with the default codec."""
    return _default_codec.encode(outcome)


def decode_outcome(data: bytes) -> Outcome:
    """Decode an outcome with the default codec."""
    return _default_codec.decode(data)
