"""
Key and signature types.

Provides the tagged key family used on the wire: public keys, secret keys and
signatures for Ed25519 (signing and verification) and Secp256k1 (parsing and
verification only). Text form is ``"<curve>:<base58>"``; wire form is one tag
byte followed by the raw key bytes.
"""

from __future__ import annotations
import os
from enum import IntEnum
from typing import Tuple, Union

import base58
from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.ed25519 import (
    Ed25519PrivateKey as CryptoEd25519PrivateKey,
    Ed25519PublicKey as CryptoEd25519PublicKey,
)

from ..codec import BorshReader, BorshWriter
from ..runtime.errors import EncodingError, ParseKeyError
from . import secp256k1


class KeyType(IntEnum):
    """Curve tag. The value is the wire discriminant."""

    ED25519 = 0
    SECP256K1 = 1

    @property
    def prefix(self) -> str:
        return "ed25519" if self is KeyType.ED25519 else "secp256k1"

    @property
    def public_key_len(self) -> int:
        return 32 if self is KeyType.ED25519 else 33

    @property
    def signature_len(self) -> int:
        return 64 if self is KeyType.ED25519 else 65

    @classmethod
    def from_prefix(cls, prefix: str) -> KeyType:
        for key_type in cls:
            if key_type.prefix == prefix:
                return key_type
        raise ParseKeyError(f"Unknown key type: {prefix}")


def _split_text(s: str) -> Tuple[KeyType, bytes]:
    if not isinstance(s, str) or ":" not in s:
        raise ParseKeyError(f"Invalid key format, expected '<type>:<base58>': {s!r}")
    prefix, data = s.split(":", 1)
    key_type = KeyType.from_prefix(prefix)
    try:
        raw = base58.b58decode(data)
    except ValueError as e:
        raise ParseKeyError(f"Invalid base58: {e}")
    return key_type, raw


def _decode_key_type(reader: BorshReader) -> KeyType:
    tag = reader.u8()
    try:
        return KeyType(tag)
    except ValueError:
        raise EncodingError(f"Unknown key type tag: {tag}")


class PublicKey:
    """
    Public key tagged with its curve.

    Instances are immutable and hashable; equality compares curve and bytes.
    """

    __slots__ = ("_key_type", "_data")

    def __init__(self, key_type: KeyType, data: bytes):
        """
        Initialize from curve tag and raw bytes.

        Args:
            key_type: Curve of the key
            data: 32 bytes for Ed25519, 33 compressed bytes for Secp256k1

        Raises:
            ParseKeyError: If the length is wrong or the point is not on the curve
        """
        key_type = KeyType(key_type)
        data = bytes(data)
        if len(data) != key_type.public_key_len:
            raise ParseKeyError(
                f"Invalid {key_type.prefix} public key length: expected "
                f"{key_type.public_key_len}, got {len(data)}"
            )
        if key_type is KeyType.ED25519:
            try:
                CryptoEd25519PublicKey.from_public_bytes(data)
            except ValueError as e:
                raise ParseKeyError(f"Invalid Ed25519 public key: {e}")
        elif not secp256k1.is_valid_public_key(data):
            raise ParseKeyError("Secp256k1 public key is not a valid curve point")
        self._key_type = key_type
        self._data = data

    @classmethod
    def ed25519(cls, data: bytes) -> PublicKey:
        return cls(KeyType.ED25519, data)

    @classmethod
    def from_string(cls, s: str) -> PublicKey:
        """Parse ``"ed25519:<base58>"`` or ``"secp256k1:<base58>"``."""
        key_type, raw = _split_text(s)
        return cls(key_type, raw)

    @classmethod
    def coerce(cls, value: Union[str, PublicKey]) -> PublicKey:
        return value if isinstance(value, PublicKey) else cls.from_string(value)

    @property
    def key_type(self) -> KeyType:
        return self._key_type

    @property
    def data(self) -> bytes:
        return self._data

    def verify(self, message: bytes, signature: Signature) -> bool:
        """
        Verify a signature against a message.

        Never raises on malformed input; a curve mismatch or bad length
        returns False.

        Args:
            message: Message that was signed
            signature: Signature to check

        Returns:
            True if signature is valid
        """
        if not isinstance(signature, Signature) or signature.key_type is not self._key_type:
            return False
        if len(signature.data) != self._key_type.signature_len:
            return False
        if self._key_type is KeyType.ED25519:
            try:
                CryptoEd25519PublicKey.from_public_bytes(self._data).verify(signature.data, message)
                return True
            except (InvalidSignature, ValueError):
                return False
        return secp256k1.verify(self._data, signature.data, message)

    def encode(self, w: BorshWriter) -> None:
        w.u8(self._key_type).fixed_bytes(self._data)

    @classmethod
    def decode(cls, r: BorshReader) -> PublicKey:
        key_type = _decode_key_type(r)
        data = r.fixed_bytes(key_type.public_key_len)
        try:
            return cls(key_type, data)
        except ParseKeyError as e:
            raise EncodingError(str(e.message), cause=e)

    def __eq__(self, other) -> bool:
        if not isinstance(other, PublicKey):
            return False
        return self._key_type is other._key_type and self._data == other._data

    def __hash__(self) -> int:
        return hash((self._key_type, self._data))

    def __str__(self) -> str:
        return f"{self._key_type.prefix}:{base58.b58encode(self._data).decode('ascii')}"

    def __repr__(self) -> str:
        return f"PublicKey({self})"


class Signature:
    """Signature tagged with its curve."""

    __slots__ = ("_key_type", "_data")

    def __init__(self, key_type: KeyType, data: bytes):
        key_type = KeyType(key_type)
        data = bytes(data)
        if len(data) != key_type.signature_len:
            raise ParseKeyError(
                f"Invalid {key_type.prefix} signature length: expected "
                f"{key_type.signature_len}, got {len(data)}"
            )
        self._key_type = key_type
        self._data = data

    @classmethod
    def from_string(cls, s: str) -> Signature:
        key_type, raw = _split_text(s)
        return cls(key_type, raw)

    @property
    def key_type(self) -> KeyType:
        return self._key_type

    @property
    def data(self) -> bytes:
        return self._data

    def encode(self, w: BorshWriter) -> None:
        w.u8(self._key_type).fixed_bytes(self._data)

    @classmethod
    def decode(cls, r: BorshReader) -> Signature:
        key_type = _decode_key_type(r)
        return cls(key_type, r.fixed_bytes(key_type.signature_len))

    def __eq__(self, other) -> bool:
        if not isinstance(other, Signature):
            return False
        return self._key_type is other._key_type and self._data == other._data

    def __hash__(self) -> int:
        return hash((self._key_type, self._data))

    def __str__(self) -> str:
        return f"{self._key_type.prefix}:{base58.b58encode(self._data).decode('ascii')}"

    def __repr__(self) -> str:
        return f"Signature({self})"


class SecretKey:
    """
    Ed25519 secret key.

    Accepts the 32-byte seed or the 64-byte seed||public form; only the
    seed is kept. The key never appears in ``repr`` output.
    """

    __slots__ = ("_seed", "_private")

    def __init__(self, data: bytes):
        """
        Initialize from raw key bytes.

        Args:
            data: 32-byte seed or 64-byte expanded secret key

        Raises:
            ParseKeyError: If the length is neither 32 nor 64
        """
        data = bytes(data)
        if len(data) not in (32, 64):
            raise ParseKeyError(f"Invalid Ed25519 secret key length: expected 32 or 64, got {len(data)}")
        self._seed = data[:32]
        self._private = CryptoEd25519PrivateKey.from_private_bytes(self._seed)

    @classmethod
    def generate(cls) -> SecretKey:
        """Generate a new random Ed25519 secret key."""
        return cls(os.urandom(32))

    @classmethod
    def from_string(cls, s: str) -> SecretKey:
        """Parse ``"ed25519:<base58>"``."""
        key_type, raw = _split_text(s)
        if key_type is not KeyType.ED25519:
            raise ParseKeyError(f"Unsupported secret key type: {key_type.prefix}")
        return cls(raw)

    @classmethod
    def coerce(cls, value: Union[str, SecretKey]) -> SecretKey:
        return value if isinstance(value, SecretKey) else cls.from_string(value)

    @property
    def key_type(self) -> KeyType:
        return KeyType.ED25519

    def public_key(self) -> PublicKey:
        raw = self._private.public_key().public_bytes(
            encoding=serialization.Encoding.Raw,
            format=serialization.PublicFormat.Raw,
        )
        return PublicKey(KeyType.ED25519, raw)

    def sign(self, message: bytes) -> Signature:
        """Sign a message. Ed25519 signatures are deterministic."""
        return Signature(KeyType.ED25519, self._private.sign(message))

    def to_bytes(self) -> bytes:
        """Expanded 64-byte form: seed followed by public key."""
        return self._seed + self.public_key().data

    def to_string(self) -> str:
        """Text form as stored in credential files. Contains the secret."""
        return f"ed25519:{base58.b58encode(self.to_bytes()).decode('ascii')}"

    def __eq__(self, other) -> bool:
        return isinstance(other, SecretKey) and self._seed == other._seed

    def __hash__(self) -> int:
        return hash(self._seed)

    def __str__(self) -> str:
        return "ed25519:***"

    def __repr__(self) -> str:
        return "SecretKey(ed25519:***)"


class KeyPair:
    """Secret key with its derived public key."""

    __slots__ = ("secret_key", "public_key")

    def __init__(self, secret_key: SecretKey):
        self.secret_key = secret_key
        self.public_key = secret_key.public_key()

    @classmethod
    def random(cls) -> KeyPair:
        return cls(SecretKey.generate())

    @classmethod
    def from_string(cls, s: str) -> KeyPair:
        return cls(SecretKey.from_string(s))

    @classmethod
    def from_seed_phrase(cls, phrase: str, passphrase: str = "", hd_path: str = None) -> KeyPair:
        """Derive a key pair from a BIP-39 phrase. See ``crypto.hd``."""
        from .hd import DEFAULT_HD_PATH, secret_key_from_seed_phrase

        return cls(secret_key_from_seed_phrase(phrase, passphrase, hd_path or DEFAULT_HD_PATH))

    def sign(self, message: bytes) -> Signature:
        return self.secret_key.sign(message)

    def __repr__(self) -> str:
        return f"KeyPair(public_key={self.public_key}, secret_key=***)"


def verify(signature: Signature, message: bytes, public_key: PublicKey) -> bool:
    """
    Verify ``signature`` over ``message`` with ``public_key``.

    Returns False on curve mismatch or malformed input instead of raising.
    """
    return public_key.verify(message, signature)
