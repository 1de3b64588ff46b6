"""
Little-endian reader over an immutable byte buffer.

Every read is bounds-checked; running off the end raises
StructuralDecodeError instead of returning short data.
"""

from __future__ import annotations

import struct

import numpy as np

from ..errors import StructuralDecodeError

# struct format and byte size per scalar type
_TYPE_INFO: dict[str, tuple[str, int]] = {
    "i16": ("<h", 2),
    "u16": ("<H", 2),
    "i32": ("<i", 4),
    "u32": ("<I", 4),
}


class ByteReader:
    """Sequential reader with a cursor, in the spirit of io.BytesIO."""

    def __init__(self, data: bytes | bytearray | memoryview):
        self._data = bytes(data)
        self._pos = 0

    @property
    def position(self) -> int:
        return self._pos

    @property
    def remaining(self) -> int:
        return len(self._data) - self._pos

    def _take(self, size: int) -> bytes:
        if size < 0:
            raise StructuralDecodeError(f"Negative read size {size} at offset {self._pos}")
        if size > self.remaining:
            raise StructuralDecodeError(
                f"Buffer ended at offset {len(self._data)} "
                f"(needed {size} bytes at offset {self._pos})"
            )
        chunk = self._data[self._pos:self._pos + size]
        self._pos += size
        return chunk

    def _scalar(self, kind: str) -> int:
        fmt, size = _TYPE_INFO[kind]
        return struct.unpack(fmt, self._take(size))[0]

    def read_i16(self) -> int:
        return self._scalar("i16")

    def read_u16(self) -> int:
        return self._scalar("u16")

    def read_i32(self) -> int:
        return self._scalar("i32")

    def read_u32(self) -> int:
        return self._scalar("u32")

    def read_bytes(self, size: int) -> bytes:
        return self._take(size)

    def read_u32_array(self, count: int) -> list[int]:
        """Read `count` little-endian uint32 values as Python ints."""
        raw = self._take(4 * count)
        return np.frombuffer(raw, dtype="<u4").astype(np.int64).tolist()

    def read_u8_array(self, count: int) -> list[int]:
        return list(self._take(count))

    def read_count(self) -> int:
        """Read an element count and reject negative values."""
        count = self.read_i32()
        if count < 0:
            raise StructuralDecodeError(f"Negative element count {count}")
        return count

    def read_rest(self) -> bytes:
        return self._take(self.remaining)
