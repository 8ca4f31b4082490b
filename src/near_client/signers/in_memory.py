"""
In-memory signer holding one secret key.
"""

from __future__ import annotations
from typing import Union

from ..crypto.keys import KeyPair, PublicKey, SecretKey
from ..types.account import AccountId
from .signer import ClaimedKey, Signer


class InMemorySigner(Signer):
    """Signs with a single key kept in process memory."""

    def __init__(self, account_id: str, secret_key: Union[str, SecretKey]):
        """
        Initialize signer.

        Args:
            account_id: Account the key belongs to
            secret_key: ``"ed25519:<base58>"`` text or a SecretKey

        Raises:
            ParseAccountIdError: If the account id is invalid
            ParseKeyError: If the key is invalid
        """
        self._account_id = AccountId(account_id)
        self._key = ClaimedKey(SecretKey.coerce(secret_key))

    @classmethod
    def from_key_pair(cls, account_id: str, key_pair: KeyPair) -> InMemorySigner:
        return cls(account_id, key_pair.secret_key)

    @classmethod
    def from_seed_phrase(cls, account_id: str, phrase: str, passphrase: str = "",
                         hd_path: str = None) -> InMemorySigner:
        return cls.from_key_pair(account_id, KeyPair.from_seed_phrase(phrase, passphrase, hd_path))

    @classmethod
    def random(cls, account_id: str) -> InMemorySigner:
        return cls.from_key_pair(account_id, KeyPair.random())

    @property
    def account_id(self) -> AccountId:
        return self._account_id

    @property
    def public_key(self) -> PublicKey:
        return self._key.public_key

    def claim_key(self) -> ClaimedKey:
        return self._key

    def __repr__(self) -> str:
        return f"InMemorySigner(account_id={self._account_id!r}, public_key={self.public_key})"
