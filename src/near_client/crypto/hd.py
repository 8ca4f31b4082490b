"""
Seed phrase helpers (BIP-39) and hardened Ed25519 derivation (SLIP-10).

- Phrases are normalized (trimmed, lowercased, whitespace collapsed) and
  validated against the English word list and checksum with the `mnemonic`
  (Trezor) package.
- Seed = PBKDF2-HMAC-SHA512(phrase, "mnemonic" + passphrase), 2048 rounds.
- SLIP-10 for Ed25519 only defines hardened children, so every path
  component must carry the ``'`` marker.
"""

from __future__ import annotations
import hashlib
import hmac
from typing import List, Tuple

from mnemonic import Mnemonic

from ..runtime.errors import InvalidSeedPhraseError, KeyDerivationError
from .keys import KeyPair, SecretKey

DEFAULT_HD_PATH = "m/44'/397'/0'"
VALID_WORD_COUNTS = (12, 15, 18, 21, 24)

_HARDENED = 0x80000000
_ED25519_CURVE_KEY = b"ed25519 seed"


def normalize_seed_phrase(phrase: str) -> str:
    return " ".join(phrase.strip().lower().split())


def parse_hd_path(path: str) -> List[int]:
    """
    Parse ``m/44'/397'/0'`` into hardened child indexes.

    Raises:
        KeyDerivationError: On a malformed or non-hardened component
    """
    parts = path.strip().split("/")
    if not parts or parts[0] != "m":
        raise KeyDerivationError(f"HD path must start with 'm': {path}")
    indexes = []
    for part in parts[1:]:
        if not part.endswith("'"):
            raise KeyDerivationError(f"Non-hardened path component '{part}' in {path}")
        try:
            index = int(part[:-1])
        except ValueError as e:
            raise KeyDerivationError(f"Invalid path component '{part}' in {path}", cause=e)
        if not 0 <= index < _HARDENED:
            raise KeyDerivationError(f"Path component out of range '{part}' in {path}")
        indexes.append(index + _HARDENED)
    return indexes


def derive_ed25519_key(seed: bytes, path: str = DEFAULT_HD_PATH) -> bytes:
    """
    SLIP-10 hardened derivation.

    Args:
        seed: BIP-39 seed (64 bytes)
        path: Hardened derivation path

    Returns:
        32-byte Ed25519 private key seed
    """
    digest = hmac.new(_ED25519_CURVE_KEY, seed, hashlib.sha512).digest()
    key, chain_code = digest[:32], digest[32:]
    for index in parse_hd_path(path):
        data = b"\x00" + key + index.to_bytes(4, "big")
        digest = hmac.new(chain_code, data, hashlib.sha512).digest()
        key, chain_code = digest[:32], digest[32:]
    return key


def seed_phrase_to_seed(phrase: str, passphrase: str = "") -> bytes:
    """
    Validate a phrase and stretch it into a 64-byte seed.

    Raises:
        InvalidSeedPhraseError: If the word count, words or checksum are wrong
    """
    normalized = normalize_seed_phrase(phrase)
    words = normalized.split(" ") if normalized else []
    if len(words) not in VALID_WORD_COUNTS:
        raise InvalidSeedPhraseError(
            f"Seed phrase must have 12, 15, 18, 21 or 24 words, got {len(words)}"
        )
    try:
        valid = Mnemonic("english").check(normalized)
    except (LookupError, ValueError) as e:
        raise InvalidSeedPhraseError("Seed phrase contains unknown words", cause=e)
    if not valid:
        raise InvalidSeedPhraseError("Seed phrase checksum mismatch or unknown words")
    return Mnemonic.to_seed(normalized, passphrase)


def secret_key_from_seed_phrase(phrase: str, passphrase: str = "",
                                hd_path: str = DEFAULT_HD_PATH) -> SecretKey:
    seed = seed_phrase_to_seed(phrase, passphrase)
    return SecretKey(derive_ed25519_key(seed, hd_path))


def generate_seed_phrase(word_count: int = 12, passphrase: str = "",
                         hd_path: str = DEFAULT_HD_PATH) -> Tuple[str, KeyPair]:
    """
    Create a new English phrase and the key pair it derives.

    Args:
        word_count: 12, 15, 18, 21 or 24
        passphrase: Optional BIP-39 passphrase
        hd_path: Hardened derivation path

    Returns:
        Tuple of (phrase, key pair)
    """
    if word_count not in VALID_WORD_COUNTS:
        raise InvalidSeedPhraseError(
            f"Word count must be one of {VALID_WORD_COUNTS}, got {word_count}"
        )
    strength = word_count * 32 // 3
    phrase = Mnemonic("english").generate(strength=strength)
    return phrase, KeyPair(secret_key_from_seed_phrase(phrase, passphrase, hd_path))
