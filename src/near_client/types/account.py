"""
Account identifiers.

Three forms are accepted: named accounts (``alice.near``), 64-hex implicit
accounts derived from an Ed25519 key, and ``0x``-prefixed 40-hex
EVM-compatible implicit accounts. Validation happens once, at construction.
"""

from __future__ import annotations
import re
from typing import Optional, Union

from ..runtime.errors import ParseAccountIdError

MIN_ACCOUNT_ID_LEN = 2
MAX_ACCOUNT_ID_LEN = 64

_HEX64 = re.compile(r"^[0-9a-fA-F]{64}$")
_NAMED_CHARS = re.compile(r"^[a-z0-9_\-.]+$")


class AccountId(str):
    """Validated account id. Behaves as an immutable ``str``."""

    def __new__(cls, value: str):
        if isinstance(value, AccountId):
            return value
        if not isinstance(value, str):
            raise ParseAccountIdError(f"Account ID must be a string, got {type(value).__name__}")
        _validate(value)
        return super().__new__(cls, value)

    @classmethod
    def coerce(cls, value: Union[str, AccountId]) -> AccountId:
        return cls(value)

    def is_implicit(self) -> bool:
        return bool(_HEX64.match(self))

    def is_evm_implicit(self) -> bool:
        return self.startswith("0x") and len(self) == 42

    def is_named(self) -> bool:
        return not self.is_implicit() and not self.is_evm_implicit()

    def is_top_level(self) -> bool:
        return self.is_named() and "." not in self

    def is_sub_account_of(self, parent: Union[str, AccountId]) -> bool:
        parent = AccountId(parent)
        if not self.is_named() or not parent.is_named():
            return False
        return self.endswith("." + parent) and len(self) > len(parent) + 1

    def parent(self) -> Optional[AccountId]:
        """Account one level up, e.g. ``near`` for ``alice.near``."""
        if not self.is_named() or "." not in self:
            return None
        return AccountId(self.split(".", 1)[1])

    def __repr__(self) -> str:
        return f"AccountId({str.__repr__(self)})"


def _validate(s: str) -> None:
    if not s:
        raise ParseAccountIdError("Account ID cannot be empty")
    if len(s) > MAX_ACCOUNT_ID_LEN:
        raise ParseAccountIdError(f"Account ID too long (max {MAX_ACCOUNT_ID_LEN}): {s}")

    if s.startswith("0x"):
        if len(s) != 42:
            raise ParseAccountIdError(f"Invalid EVM implicit account ID: {s}")
        if not re.match(r"^[0-9a-fA-F]{40}$", s[2:]):
            raise ParseAccountIdError(f"Invalid character in EVM implicit account ID: {s}")
        return

    if _HEX64.match(s):
        return

    if len(s) < MIN_ACCOUNT_ID_LEN:
        raise ParseAccountIdError(f"Account ID too short (min {MIN_ACCOUNT_ID_LEN}): {s}")
    if not _NAMED_CHARS.match(s):
        bad = next(c for c in s if not _NAMED_CHARS.match(c))
        raise ParseAccountIdError(f"Invalid character {bad!r} in account ID: {s}")
    for part in s.split("."):
        if not part:
            raise ParseAccountIdError(f"Invalid account ID format (empty segment): {s}")
        if part[0] in "-_" or part[-1] in "-_":
            raise ParseAccountIdError(
                f"Invalid account ID format (segment starts or ends with separator): {s}"
            )
