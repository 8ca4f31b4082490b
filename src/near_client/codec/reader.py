"""
Borsh Reader

Decodes the canonical binary encoding produced by ``BorshWriter``.
"""

import builtins
import struct
from typing import Callable, List, Optional, TypeVar

from ..runtime.errors import EncodingError

T = TypeVar("T")


class BorshReader:
    """
    Sequential decoder over a byte buffer.

    Reading past the end raises ``EncodingError``; callers that decode a
    whole object should finish with ``expect_eof``.
    """

    def __init__(self, buf: builtins.bytes):
        """
        Initialize reader with byte buffer.

        Args:
            buf: Byte buffer to read from
        """
        self._buf = buf
        self._off = 0

    @property
    def eof(self) -> bool:
        """True if at end of buffer."""
        return self._off >= len(self._buf)

    @property
    def remaining(self) -> int:
        return len(self._buf) - self._off

    def _take(self, n: int, what: str) -> builtins.bytes:
        if n < 0 or self._off + n > len(self._buf):
            raise EncodingError(
                f"Buffer overflow: attempting to read {what} beyond end",
                details={"offset": self._off, "wanted": n, "size": len(self._buf)},
            )
        chunk = self._buf[self._off:self._off + n]
        self._off += n
        return builtins.bytes(chunk)

    def u8(self) -> int:
        """Read unsigned 8-bit integer."""
        return self._take(1, "u8")[0]

    def u32(self) -> int:
        """Read unsigned 32-bit little-endian integer."""
        return struct.unpack("<I", self._take(4, "u32"))[0]

    def u64(self) -> int:
        """Read unsigned 64-bit little-endian integer."""
        return struct.unpack("<Q", self._take(8, "u64"))[0]

    def u128(self) -> int:
        """Read unsigned 128-bit little-endian integer."""
        return int.from_bytes(self._take(16, "u128"), "little")

    def fixed_bytes(self, n: int) -> builtins.bytes:
        """
        Read exactly n raw bytes.

        Args:
            n: Number of bytes to read

        Returns:
            Bytes read
        """
        return self._take(n, f"{n} bytes")

    def bytes(self) -> builtins.bytes:
        """Read a u32 length-prefixed byte vector."""
        length = self.u32()
        return self._take(length, "byte vector")

    def string(self) -> str:
        """Read a u32 length-prefixed UTF-8 string."""
        raw = self.bytes()
        try:
            return raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise EncodingError("Invalid UTF-8 in string", cause=e)

    def option(self, read: Callable[["BorshReader"], T]) -> Optional[T]:
        """
        Read an optional value.

        Args:
            read: Callable decoding a present value from this reader
        """
        flag = self.u8()
        if flag == 0:
            return None
        if flag != 1:
            raise EncodingError(f"Invalid option tag: {flag}")
        return read(self)

    def vec(self, read: Callable[["BorshReader"], T]) -> List[T]:
        """
        Read a u32 counted sequence.

        Args:
            read: Callable decoding one element from this reader
        """
        count = self.u32()
        return [read(self) for _ in range(count)]

    def expect_eof(self) -> None:
        """Raise if unread bytes remain."""
        if not self.eof:
            raise EncodingError(f"Trailing bytes after decode: {self.remaining}")
