"""
Little-endian binary reader/writer for the persisted cache files.

Strings are UTF-8 with a 7-bit encoded length prefix (the same layout the
.NET ``BinaryWriter`` produces), integers are int32 and entropies float32.
"""

import struct

from .exceptions import CorruptCacheError


_INT32 = struct.Struct('<i')
_FLOAT32 = struct.Struct('<f')


class BinaryWriter:

    def __init__(self):
        self.buffer = bytearray()

    def write_int32(self, value: int):
        self.buffer += _INT32.pack(value)

    def write_float32(self, value: float):
        self.buffer += _FLOAT32.pack(value)

    def write_string(self, value: str):
        data = value.encode('utf-8')
        n = len(data)
        while n >= 0x80:
            self.buffer.append((n & 0x7F) | 0x80)
            n >>= 7
        self.buffer.append(n)
        self.buffer += data

    def write_bytes(self, data):
        self.buffer += bytes(data)

    def getvalue(self) -> bytes:
        return bytes(self.buffer)


class BinaryReader:
    """Sequential reader; every read past the end raises ``CorruptCacheError``."""

    def __init__(self, data):
        self.data = memoryview(data)
        self.pos = 0

    @property
    def remaining(self) -> int:
        return len(self.data) - self.pos

    def _take(self, n: int) -> memoryview:
        if n < 0 or self.pos + n > len(self.data):
            raise CorruptCacheError(
                f"Unexpected end of data at byte {self.pos} (wanted {n}, have {self.remaining})")
        chunk = self.data[self.pos:self.pos + n]
        self.pos += n
        return chunk

    def read_int32(self) -> int:
        return _INT32.unpack(self._take(4))[0]

    def read_float32(self) -> float:
        return _FLOAT32.unpack(self._take(4))[0]

    def read_string(self) -> str:
        length = 0
        shift = 0
        while True:
            b = self._take(1)[0]
            length |= (b & 0x7F) << shift
            if b < 0x80:
                break
            shift += 7
            if shift > 28:
                raise CorruptCacheError(f"Bad string length prefix at byte {self.pos}")
        try:
            return bytes(self._take(length)).decode('utf-8')
        except UnicodeDecodeError as e:
            raise CorruptCacheError(f"Invalid UTF-8 string at byte {self.pos}") from e

    def read_bytes(self, n: int) -> memoryview:
        return self._take(n)
