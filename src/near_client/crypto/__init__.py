"""
Cryptographic primitives: tagged keys and signatures, seed phrases.
"""

from .hd import (
    DEFAULT_HD_PATH,
    derive_ed25519_key,
    generate_seed_phrase,
    normalize_seed_phrase,
    seed_phrase_to_seed,
)
from .keys import KeyPair, KeyType, PublicKey, SecretKey, Signature, verify

__all__ = [
    "DEFAULT_HD_PATH",
    "KeyPair",
    "KeyType",
    "PublicKey",
    "SecretKey",
    "Signature",
    "derive_ed25519_key",
    "generate_seed_phrase",
    "normalize_seed_phrase",
    "seed_phrase_to_seed",
    "verify",
]
