"""
Big-endian framing primitives shared by the identity and assignment codecs.

Fields follow the usual group-protocol conventions: fixed width signed
integers, strings prefixed with an int16 length and byte blobs prefixed
with an int32 length. The reader raises ProtocolDecodeError for every
malformed input so codecs never leak ``struct.error`` or
``UnicodeDecodeError``.
"""

from __future__ import annotations

import struct

from groupelect.exceptions import ProtocolDecodeError

_INT8 = struct.Struct(">b")
_INT16 = struct.Struct(">h")
_INT32 = struct.Struct(">i")

INT16_MAX = 2**15 - 1


class WireWriter:
    """Accumulates encoded fields into a single payload."""

    def __init__(self) -> None:
        self._parts: list[bytes] = []

    def int8(self, value: int) -> WireWriter:
        self._parts.append(_INT8.pack(value))
        return self

    def int16(self, value: int) -> WireWriter:
        self._parts.append(_INT16.pack(value))
        return self

    def int32(self, value: int) -> WireWriter:
        self._parts.append(_INT32.pack(value))
        return self

    def flag(self, value: bool) -> WireWriter:
        return self.int8(1 if value else 0)

    def string(self, value: str) -> WireWriter:
        encoded = value.encode("utf-8")
        if len(encoded) > INT16_MAX:
            raise ValueError(f"string of {len(encoded)} bytes exceeds the int16 length prefix")
        self.int16(len(encoded))
        self._parts.append(encoded)
        return self

    def blob(self, value: bytes) -> WireWriter:
        self.int32(len(value))
        self._parts.append(value)
        return self

    def getvalue(self) -> bytes:
        return b"".join(self._parts)


class WireReader:
    """
    Sequential reader over an encoded payload.

    Args:
        data: The payload to read
        payload: Payload kind reported in ProtocolDecodeError
    """

    def __init__(self, data: bytes, payload: str) -> None:
        if not isinstance(data, bytes | bytearray | memoryview):
            raise ProtocolDecodeError(payload, f"expected bytes, got {type(data).__name__}")
        self._data = memoryview(bytes(data))
        self._offset = 0
        self._payload = payload

    def error(self, reason: str) -> ProtocolDecodeError:
        return ProtocolDecodeError(self._payload, reason)

    def _take(self, size: int, field: str) -> memoryview:
        end = self._offset + size
        if end > len(self._data):
            raise self.error(
                f"truncated input reading {field}: need {size} bytes at offset "
                f"{self._offset}, only {len(self._data) - self._offset} available"
            )
        chunk = self._data[self._offset : end]
        self._offset = end
        return chunk

    def int8(self, field: str) -> int:
        return int(_INT8.unpack(self._take(_INT8.size, field))[0])

    def int16(self, field: str) -> int:
        return int(_INT16.unpack(self._take(_INT16.size, field))[0])

    def int32(self, field: str) -> int:
        return int(_INT32.unpack(self._take(_INT32.size, field))[0])

    def flag(self, field: str) -> bool:
        value = self.int8(field)
        if value not in (0, 1):
            raise self.error(f"invalid {field} flag {value}")
        return value == 1

    def string(self, field: str) -> str:
        length = self.int16(f"{field} length")
        if length < 0:
            raise self.error(f"negative {field} length {length}")
        raw = self._take(length, field)
        try:
            return bytes(raw).decode("utf-8")
        except UnicodeDecodeError as e:
            raise self.error(f"{field} is not valid UTF-8") from e

    def blob(self, field: str) -> bytes:
        length = self.int32(f"{field} length")
        if length < 0:
            raise self.error(f"negative {field} length {length}")
        return bytes(self._take(length, field))

    def finish(self) -> None:
        """Ensure the whole payload was consumed."""
        remaining = len(self._data) - self._offset
        if remaining:
            raise self.error(f"{remaining} unexpected trailing bytes")
