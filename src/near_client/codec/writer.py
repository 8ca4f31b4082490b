"""
Borsh Writer

Implements the canonical binary encoding used for transactions, actions and
signed messages: little-endian fixed-width integers, u32 length prefixes for
strings and sequences, and single-byte tags for options and enums.
"""

import builtins
import struct
from typing import Callable, Iterable, Optional, TypeVar

from ..runtime.errors import EncodingError

T = TypeVar("T")

_U128_MAX = (1 << 128) - 1


class BorshWriter:
    """
    Append-only canonical encoder.

    Each method appends one value; ``to_bytes`` returns the accumulated
    buffer. Values out of range raise ``EncodingError`` instead of being
    silently truncated.
    """

    def __init__(self):
        """Initialize writer with empty byte buffer."""
        self._bb = bytearray()

    def u8(self, v: int) -> "BorshWriter":
        """
        Write unsigned 8-bit integer.

        Args:
            v: Integer value to write (0-255)
        """
        self._bb.extend(self._pack("<B", v, "u8"))
        return self

    def u32(self, v: int) -> "BorshWriter":
        """
        Write unsigned 32-bit integer in little-endian format.

        Args:
            v: Integer value to write
        """
        self._bb.extend(self._pack("<I", v, "u32"))
        return self

    def u64(self, v: int) -> "BorshWriter":
        """
        Write unsigned 64-bit integer in little-endian format.

        Args:
            v: Integer value to write
        """
        self._bb.extend(self._pack("<Q", v, "u64"))
        return self

    def u128(self, v: int) -> "BorshWriter":
        """
        Write unsigned 128-bit integer in little-endian format.

        Args:
            v: Integer value to write
        """
        if not 0 <= v <= _U128_MAX:
            raise EncodingError(f"Value out of range for u128: {v}")
        self._bb.extend(v.to_bytes(16, "little"))
        return self

    def fixed_bytes(self, v: bytes) -> "BorshWriter":
        """
        Write raw bytes without length prefix (fixed-size arrays).

        Args:
            v: Bytes to write directly
        """
        self._bb.extend(v)
        return self

    def bytes(self, v: bytes) -> "BorshWriter":
        """
        Write a byte vector: u32 length followed by the bytes.

        Args:
            v: Bytes to write with length prefix
        """
        self.u32(len(v))
        self._bb.extend(v)
        return self

    def string(self, s: str) -> "BorshWriter":
        """
        Write UTF-8 string with u32 length prefix.

        Args:
            s: String to write
        """
        return self.bytes(s.encode("utf-8"))

    def option(self, v: Optional[T], write: Callable[["BorshWriter", T], object]) -> "BorshWriter":
        """
        Write an optional value: 0 for None, else 1 followed by the value.

        Args:
            v: Value or None
            write: Callable encoding a present value into this writer
        """
        if v is None:
            return self.u8(0)
        self.u8(1)
        write(self, v)
        return self

    def vec(self, items: Iterable[T], write: Callable[["BorshWriter", T], object]) -> "BorshWriter":
        """
        Write a sequence: u32 count followed by each element.

        Args:
            items: Elements to write
            write: Callable encoding one element into this writer
        """
        items = list(items)
        self.u32(len(items))
        for item in items:
            write(self, item)
        return self

    def to_bytes(self) -> builtins.bytes:
        """
        Return accumulated bytes as immutable bytes object.

        Returns:
            Bytes containing all written data
        """
        return bytes(self._bb)

    @staticmethod
    def _pack(fmt: str, v: int, name: str) -> builtins.bytes:
        try:
            return struct.pack(fmt, v)
        except struct.error as e:
            raise EncodingError(f"Value out of range for {name}: {v}", cause=e)
