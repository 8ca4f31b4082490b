"""
Token amounts and gas.

``NearToken`` counts yoctoNEAR (10^-24 NEAR) in an unsigned 128-bit range;
``Gas`` counts gas units in an unsigned 64-bit range, which is its wire
width. String parsing always requires a unit: ``"5 NEAR"``, ``"500 mNEAR"``,
``"1000 yocto"``, ``"30 Tgas"``. Bare numbers are rejected as ambiguous.
"""

from __future__ import annotations
from functools import total_ordering
from typing import Optional, Union

from ..runtime.errors import ParseAmountError, ParseGasError

YOCTO_PER_NEAR = 10 ** 24
YOCTO_PER_MILLINEAR = 10 ** 21
GAS_PER_TGAS = 10 ** 12
GAS_PER_GGAS = 10 ** 9

U64_MAX = (1 << 64) - 1
U128_MAX = (1 << 128) - 1


def _parse_uint(text: str, original: str, error) -> int:
    text = text.strip()
    if not text.isdigit():
        raise error(f"Invalid number: {original}")
    return int(text)


def _strip_suffix(s: str, *suffixes: str) -> Optional[str]:
    for suffix in suffixes:
        if s.endswith(suffix):
            return s[: -len(suffix)]
    return None


@total_ordering
class _Quantity:
    """Unsigned bounded integer with checked and saturating arithmetic."""

    __slots__ = ("_value",)
    _MAX = U128_MAX

    def __init__(self, value: int):
        if isinstance(value, _Quantity):
            value = value._value
        if isinstance(value, bool) or not isinstance(value, int):
            raise TypeError(f"{type(self).__name__} requires an int, got {type(value).__name__}")
        if not 0 <= value <= self._MAX:
            raise OverflowError(f"{type(self).__name__} out of range: {value}")
        self._value = value

    @property
    def value(self) -> int:
        return self._value

    def __int__(self) -> int:
        return self._value

    def __index__(self) -> int:
        return self._value

    def __eq__(self, other) -> bool:
        if type(other) is type(self):
            return self._value == other._value
        return NotImplemented

    def __lt__(self, other) -> bool:
        if type(other) is type(self):
            return self._value < other._value
        return NotImplemented

    def __hash__(self) -> int:
        return hash((type(self).__name__, self._value))

    def __bool__(self) -> bool:
        return self._value != 0

    def is_zero(self) -> bool:
        return self._value == 0

    def checked_add(self, other):
        total = self._value + int(other)
        return type(self)(total) if total <= self._MAX else None

    def checked_sub(self, other):
        diff = self._value - int(other)
        return type(self)(diff) if diff >= 0 else None

    def saturating_add(self, other):
        return type(self)(min(self._value + int(other), self._MAX))

    def saturating_sub(self, other):
        return type(self)(max(self._value - int(other), 0))

    def __add__(self, other):
        if type(other) is not type(self):
            return NotImplemented
        result = self.checked_add(other)
        if result is None:
            raise OverflowError(f"{type(self).__name__} addition overflow")
        return result

    def __sub__(self, other):
        if type(other) is not type(self):
            return NotImplemented
        result = self.checked_sub(other)
        if result is None:
            raise OverflowError(f"{type(self).__name__} subtraction underflow")
        return result


class NearToken(_Quantity):
    """NEAR amount in yoctoNEAR."""

    __slots__ = ()
    _MAX = U128_MAX

    @classmethod
    def near(cls, amount: int) -> NearToken:
        return cls(amount * YOCTO_PER_NEAR)

    @classmethod
    def millinear(cls, amount: int) -> NearToken:
        return cls(amount * YOCTO_PER_MILLINEAR)

    @classmethod
    def yocto(cls, amount: int) -> NearToken:
        return cls(amount)

    @classmethod
    def zero(cls) -> NearToken:
        return cls(0)

    @classmethod
    def from_near_decimal(cls, s: str) -> NearToken:
        """
        Parse a decimal NEAR quantity such as ``"1.5"``.

        Fractional digits beyond 24 are truncated.
        """
        s = s.strip()
        integer_part, _, decimal_part = s.partition(".")
        if not (integer_part or decimal_part) or (integer_part and not integer_part.isdigit()) \
                or (decimal_part and not decimal_part.isdigit()):
            raise ParseAmountError(f"Invalid number: {s}")
        decimal_part = decimal_part[:24]
        integer = int(integer_part) if integer_part else 0
        fraction = int(decimal_part.ljust(24, "0")) if decimal_part else 0
        total = integer * YOCTO_PER_NEAR + fraction
        if total > U128_MAX:
            raise ParseAmountError(f"Amount overflow: {s}")
        return cls(total)

    @classmethod
    def parse(cls, s: str) -> NearToken:
        """
        Parse an amount with an explicit unit.

        Raises:
            ParseAmountError: On a bare number, unknown unit or overflow
        """
        original = s
        s = s.strip()

        value = _strip_suffix(s, " NEAR", " near")
        if value is not None:
            return cls.from_near_decimal(value)

        value = _strip_suffix(s, " milliNEAR", " mNEAR")
        if value is not None:
            total = _parse_uint(value, original, ParseAmountError) * YOCTO_PER_MILLINEAR
            if total > U128_MAX:
                raise ParseAmountError(f"Amount overflow: {original}")
            return cls(total)

        value = _strip_suffix(s, " yoctoNEAR", " yocto")
        if value is not None:
            total = _parse_uint(value, original, ParseAmountError)
            if total > U128_MAX:
                raise ParseAmountError(f"Amount overflow: {original}")
            return cls(total)

        if s and all(c.isdigit() or c == "." for c in s):
            raise ParseAmountError(
                f"Ambiguous amount {s!r}: add a unit such as '{s} NEAR' or '{s} yocto'"
            )
        raise ParseAmountError(f"Invalid amount format: {original}")

    @classmethod
    def coerce(cls, value: Union[str, int, NearToken]) -> NearToken:
        """Accept a NearToken, a yoctoNEAR int, or a string with a unit."""
        if isinstance(value, NearToken):
            return value
        if isinstance(value, str):
            return cls.parse(value)
        return cls(value)

    def as_yoctonear(self) -> int:
        return self._value

    def as_near(self) -> int:
        """Whole NEAR, truncated."""
        return self._value // YOCTO_PER_NEAR

    def as_near_float(self) -> float:
        return self._value / YOCTO_PER_NEAR

    def __str__(self) -> str:
        if self._value == 0:
            return "0 NEAR"
        whole, remainder = divmod(self._value, YOCTO_PER_NEAR)
        if remainder == 0:
            return f"{whole} NEAR"
        decimals = f"{remainder:024d}".rstrip("0")[:5]
        return f"{whole}.{decimals} NEAR"

    def __repr__(self) -> str:
        return f"NearToken({self._value})"


class Gas(_Quantity):
    """Gas units."""

    __slots__ = ()
    _MAX = U64_MAX

    @classmethod
    def tgas(cls, amount: int) -> Gas:
        return cls(amount * GAS_PER_TGAS)

    @classmethod
    def ggas(cls, amount: int) -> Gas:
        return cls(amount * GAS_PER_GGAS)

    @classmethod
    def parse(cls, s: str) -> Gas:
        """
        Parse ``"N Tgas"``, ``"N Ggas"`` or ``"N gas"``.

        Raises:
            ParseGasError: On a bare number, unknown unit or overflow
        """
        original = s
        s = s.strip()
        for suffixes, scale in (((" Tgas", " tgas", " TGas"), GAS_PER_TGAS),
                                ((" Ggas", " ggas", " GGas"), GAS_PER_GGAS),
                                ((" gas",), 1)):
            value = _strip_suffix(s, *suffixes)
            if value is not None:
                total = _parse_uint(value, original, ParseGasError) * scale
                if total > U64_MAX:
                    raise ParseGasError(f"Gas overflow: {original}")
                return cls(total)
        if s.isdigit():
            raise ParseGasError(f"Ambiguous gas {s!r}: add a unit such as '{s} Tgas' or '{s} gas'")
        raise ParseGasError(f"Invalid gas format: {original}")

    @classmethod
    def coerce(cls, value: Union[str, int, Gas]) -> Gas:
        """Accept a Gas, a raw int, or a string with a unit."""
        if isinstance(value, Gas):
            return value
        if isinstance(value, str):
            return cls.parse(value)
        return cls(value)

    def as_gas(self) -> int:
        return self._value

    def as_tgas(self) -> int:
        return self._value // GAS_PER_TGAS

    def __str__(self) -> str:
        tgas, remainder = divmod(self._value, GAS_PER_TGAS)
        if tgas > 0 and remainder == 0:
            return f"{tgas} Tgas"
        return f"{self._value} gas"

    def __repr__(self) -> str:
        return f"Gas({self._value})"


Gas.DEFAULT = Gas.tgas(30)
Gas.MAX = Gas.tgas(1000)
