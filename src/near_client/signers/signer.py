"""
Base signer interface.

A signer acts for exactly one account. Transaction code asks it for a
``ClaimedKey`` (the public key plus a handle that signs with that same key),
looks up the nonce for that key, and signs the transaction hash with the
handle. Single-key signers always hand out the same key; rotating signers
hand out a different one per claim.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Tuple

from ..crypto.keys import PublicKey, SecretKey, Signature
from ..nep413 import SignedMessage, SignMessageParams, serialize_message
from ..runtime.errors import SigningFailedError
from ..types.account import AccountId


class ClaimedKey:
    """A key reserved for one signing operation."""

    __slots__ = ("_secret_key", "public_key")

    def __init__(self, secret_key: SecretKey, public_key: PublicKey = None):
        self._secret_key = secret_key
        self.public_key = public_key or secret_key.public_key()

    def sign(self, message: bytes) -> Signature:
        """
        Sign with the claimed key.

        Raises:
            SigningFailedError: If the backend rejects the operation
        """
        try:
            return self._secret_key.sign(message)
        except ValueError as e:
            raise SigningFailedError(f"Signing with {self.public_key} failed", cause=e)

    def __repr__(self) -> str:
        return f"ClaimedKey({self.public_key})"


class Signer(ABC):
    """
    Signing capability for one account.

    Implementations must be safe to share between concurrent tasks.
    """

    @property
    @abstractmethod
    def account_id(self) -> AccountId:
        """Account this signer signs for."""

    @property
    @abstractmethod
    def public_key(self) -> PublicKey:
        """
        Key the next ``sign`` call will use.

        For rotating signers this is advisory only; use ``claim_key`` when
        the key must match the signature.
        """

    @abstractmethod
    def claim_key(self) -> ClaimedKey:
        """
        Reserve a key for one operation.

        Returns:
            Handle whose ``public_key`` is the key its ``sign`` uses
        """

    async def sign(self, message: bytes) -> Tuple[Signature, PublicKey]:
        """
        Sign a message.

        Args:
            message: Bytes to sign (a 32-byte hash for transactions)

        Returns:
            Tuple of (signature, public key used)
        """
        key = self.claim_key()
        return key.sign(message), key.public_key

    async def sign_nep413(self, params: SignMessageParams) -> SignedMessage:
        """
        Sign an off-chain message.

        Args:
            params: Message, recipient, nonce and optional callback/state

        Returns:
            SignedMessage ready to hand to a verifier
        """
        digest = serialize_message(params)
        signature, public_key = await self.sign(bytes(digest))
        return SignedMessage(
            account_id=self.account_id,
            public_key=public_key,
            signature=signature,
            state=params.state,
        )

    sign_offchain = sign_nep413
