"""
Off-chain message signing (NEP-413).

A wallet proves control of an account by signing
``sha256(u32le(NEP413_TAG) || borsh(message, nonce[32], recipient, callback_url?))``.
The tag keeps this hash disjoint from transaction and delegate hashes.

The nonce embeds its creation time (8-byte big-endian milliseconds followed
by 24 random bytes), so a verifier can reject stale or future-dated
messages without storing nonces. Tracking nonces already consumed inside
the accepted window is up to the caller.
"""

from __future__ import annotations
import base64
import binascii
import logging
import os
import time
from dataclasses import dataclass
from typing import Any, Optional

import base58
from pydantic import BaseModel, Field, field_serializer, field_validator

from .codec import BorshWriter
from .crypto.keys import KeyType, PublicKey, Signature
from .runtime.errors import AccessKeyNotFoundError, AccountNotFoundError, ParseKeyError
from .types.account import AccountId
from .types.block_reference import BlockReference
from .types.hash import CryptoHash

logger = logging.getLogger(__name__)

# 2^31 + 413
NEP413_TAG = 2147484061

# seconds
DEFAULT_MAX_AGE = 5 * 60.0

NONCE_LEN = 32


def generate_nonce() -> bytes:
    """Current time in ms (8 bytes, big-endian) followed by 24 random bytes."""
    timestamp_ms = int(time.time() * 1000)
    return timestamp_ms.to_bytes(8, "big") + os.urandom(NONCE_LEN - 8)


def extract_timestamp_from_nonce(nonce: bytes) -> int:
    """Milliseconds since the epoch embedded in ``nonce``."""
    return int.from_bytes(nonce[:8], "big")


@dataclass(frozen=True)
class SignMessageParams:
    message: str
    recipient: str
    nonce: bytes
    callback_url: Optional[str] = None
    state: Optional[str] = None

    def __post_init__(self):
        if len(self.nonce) != NONCE_LEN:
            raise ValueError(f"NEP-413 nonce must be {NONCE_LEN} bytes, got {len(self.nonce)}")
        object.__setattr__(self, "nonce", bytes(self.nonce))

    @classmethod
    def new(cls, message: str, recipient: str, callback_url: Optional[str] = None,
            state: Optional[str] = None) -> SignMessageParams:
        """Params with a freshly generated nonce."""
        return cls(message, recipient, generate_nonce(), callback_url, state)


def serialize_message(params: SignMessageParams) -> CryptoHash:
    """Hash to sign for ``params``."""
    w = BorshWriter()
    w.u32(NEP413_TAG)
    w.string(params.message)
    w.fixed_bytes(params.nonce)
    w.string(params.recipient)
    w.option(params.callback_url, BorshWriter.string)
    return CryptoHash.of(w.to_bytes())


def parse_signature(value: str) -> Signature:
    """
    Accept base64 (the wire format), ``ed25519:<base58>`` or plain base58.

    Raises:
        ParseKeyError: If none of the encodings yields a 64-byte signature
    """
    try:
        raw = base64.b64decode(value, validate=True)
    except (binascii.Error, ValueError):
        raw = b""
    if len(raw) == 64:
        return Signature(KeyType.ED25519, raw)
    data = value[len("ed25519:"):] if value.startswith("ed25519:") else value
    try:
        raw = base58.b58decode(data)
    except ValueError:
        raw = b""
    if len(raw) == 64:
        return Signature(KeyType.ED25519, raw)
    raise ParseKeyError("Invalid signature format. Expected base64, ed25519:base58, or plain base58")


class SignedMessage(BaseModel):
    """Signature over a NEP-413 message, in the wallet JSON shape."""

    account_id: AccountId = Field(alias="accountId")
    public_key: PublicKey = Field(alias="publicKey")
    signature: Signature
    state: Optional[str] = None

    model_config = {"populate_by_name": True, "arbitrary_types_allowed": True}

    @field_validator("account_id", mode="before")
    @classmethod
    def _parse_account_id(cls, v: Any) -> AccountId:
        return AccountId(v)

    @field_validator("public_key", mode="before")
    @classmethod
    def _parse_public_key(cls, v: Any) -> PublicKey:
        return PublicKey.coerce(v)

    @field_validator("signature", mode="before")
    @classmethod
    def _parse_signature(cls, v: Any) -> Signature:
        if isinstance(v, Signature):
            return v
        return parse_signature(v)

    @field_serializer("account_id", "public_key")
    def _dump_text(self, v: Any) -> str:
        return str(v)

    @field_serializer("signature")
    def _dump_signature(self, v: Signature) -> str:
        return base64.b64encode(v.data).decode("ascii")

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True, exclude_none=True)

    @classmethod
    def from_json(cls, data: str) -> SignedMessage:
        return cls.model_validate_json(data)


class AuthPayload(BaseModel):
    """Signed message plus the params needed to verify it, for HTTP transport."""

    signed_message: SignedMessage = Field(alias="signedMessage")
    nonce: bytes
    message: str
    recipient: str
    callback_url: Optional[str] = Field(default=None, alias="callbackUrl")

    model_config = {"populate_by_name": True}

    @field_validator("nonce", mode="before")
    @classmethod
    def _parse_nonce(cls, v: Any) -> bytes:
        if isinstance(v, str):
            v = bytes.fromhex(v)
        if len(v) != NONCE_LEN:
            raise ValueError(f"nonce must be {NONCE_LEN} bytes")
        return bytes(v)

    @field_serializer("nonce")
    def _dump_nonce(self, v: bytes) -> str:
        return v.hex()

    @classmethod
    def from_signed(cls, signed_message: SignedMessage, params: SignMessageParams) -> AuthPayload:
        return cls(
            signed_message=signed_message,
            nonce=params.nonce,
            message=params.message,
            recipient=params.recipient,
            callback_url=params.callback_url,
        )

    def to_params(self) -> SignMessageParams:
        return SignMessageParams(
            message=self.message,
            recipient=self.recipient,
            nonce=self.nonce,
            callback_url=self.callback_url,
            state=self.signed_message.state,
        )

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True, exclude_none=True)

    @classmethod
    def from_json(cls, data: str) -> AuthPayload:
        return cls.model_validate_json(data)


@dataclass
class VerifyOptions:
    """
    Verification policy.

    Attributes:
        max_age: Maximum nonce age in seconds; None skips the time check
        require_full_access: Also require the key to be a full-access key
            of the account (one RPC round-trip)
    """
    max_age: Optional[float] = DEFAULT_MAX_AGE
    require_full_access: bool = True


def verify_signature(signed: SignedMessage, params: SignMessageParams,
                     max_age: Optional[float] = DEFAULT_MAX_AGE) -> bool:
    """
    Offline check: nonce freshness and signature validity.

    Args:
        signed: Signed message to check
        params: Params the message was supposedly signed over
        max_age: Maximum nonce age in seconds, None to skip

    Returns:
        True if the nonce is fresh and the signature matches
    """
    if max_age is not None:
        timestamp_ms = extract_timestamp_from_nonce(params.nonce)
        now_ms = int(time.time() * 1000)
        if timestamp_ms > now_ms:
            logger.debug(f"Rejecting message with future nonce timestamp {timestamp_ms}")
            return False
        if now_ms - timestamp_ms > max_age * 1000:
            logger.debug(f"Rejecting expired message nonce (age {now_ms - timestamp_ms} ms)")
            return False
    digest = serialize_message(params)
    return signed.public_key.verify(bytes(digest), signed.signature)


async def verify(signed: SignedMessage, params: SignMessageParams, rpc,
                 options: Optional[VerifyOptions] = None) -> bool:
    """
    Full verification, including key ownership on the ledger.

    Args:
        signed: Signed message to check
        params: Params the message was supposedly signed over
        rpc: ``RpcClient`` used to look up the access key
        options: Verification policy

    Returns:
        True if valid; False if the signature, nonce or key check fails

    Raises:
        RpcError: On transport failures other than a missing account or key
    """
    options = options or VerifyOptions()
    if not verify_signature(signed, params, options.max_age):
        return False
    if options.require_full_access:
        try:
            access_key = await rpc.view_access_key(
                signed.account_id, signed.public_key, BlockReference.optimistic()
            )
        except (AccessKeyNotFoundError, AccountNotFoundError) as e:
            logger.debug(f"Key ownership check failed: {e}")
            return False
        if not access_key.is_full_access:
            return False
    return True
