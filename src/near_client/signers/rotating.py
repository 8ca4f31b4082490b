"""
Round-robin signer over several keys of one account.

Each access key has its own nonce sequence on the ledger, so spreading
transactions across N keys lets N submissions proceed without contending
for one key's nonces.
"""

from __future__ import annotations
import itertools
from typing import List, Sequence, Union

from ..crypto.keys import PublicKey, SecretKey
from ..runtime.errors import ConfigError
from ..types.account import AccountId
from .signer import ClaimedKey, Signer


class RotatingSigner(Signer):
    """Hands out its keys in turn, one per claim."""

    def __init__(self, account_id: str, keys: Sequence[Union[str, SecretKey]]):
        """
        Initialize signer.

        Args:
            account_id: Account all keys belong to
            keys: Secret keys (objects or ``"ed25519:..."`` text)

        Raises:
            ConfigError: If no keys are given
        """
        if not keys:
            raise ConfigError("RotatingSigner requires at least one key")
        self._account_id = AccountId(account_id)
        self._keys: List[ClaimedKey] = [ClaimedKey(SecretKey.coerce(k)) for k in keys]
        # next() on itertools.count is atomic under the GIL
        self._counter = itertools.count()
        self._peek = 0

    @property
    def account_id(self) -> AccountId:
        return self._account_id

    @property
    def public_key(self) -> PublicKey:
        return self._keys[self._peek % len(self._keys)].public_key

    @property
    def key_count(self) -> int:
        return len(self._keys)

    @property
    def public_keys(self) -> List[PublicKey]:
        return [k.public_key for k in self._keys]

    def claim_key(self) -> ClaimedKey:
        index = next(self._counter)
        self._peek = index + 1
        return self._keys[index % len(self._keys)]

    def __repr__(self) -> str:
        return f"RotatingSigner(account_id={self._account_id!r}, key_count={len(self._keys)})"
