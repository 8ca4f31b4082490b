"""
SECP256K1 support.

Keys of this curve appear on the ledger as 33-byte compressed points with
65-byte ``r || s || v`` signatures over a 32-byte digest. Only point
validation and verification are provided; this client does not sign with
Secp256k1 keys.
"""

from ecdsa import BadSignatureError, SECP256k1, VerifyingKey
from ecdsa.errors import MalformedPointError


def is_valid_public_key(data: bytes) -> bool:
    """
    Check that ``data`` is a compressed point on the curve.

    Args:
        data: 33-byte SEC1 compressed public key

    Returns:
        True if the point decodes
    """
    if len(data) != 33 or data[0] not in (0x02, 0x03):
        return False
    try:
        VerifyingKey.from_string(data, curve=SECP256k1)
        return True
    except (MalformedPointError, ValueError):
        return False


def verify(public_key: bytes, signature: bytes, digest: bytes) -> bool:
    """
    Verify a recoverable signature against a 32-byte digest.

    Args:
        public_key: 33-byte compressed public key
        signature: 65-byte signature; the trailing recovery byte is ignored
        digest: 32-byte message digest

    Returns:
        True if signature is valid
    """
    if len(signature) != 65 or len(digest) != 32:
        return False
    try:
        vk = VerifyingKey.from_string(public_key, curve=SECP256k1)
        return vk.verify_digest(signature[:64], digest)
    except (BadSignatureError, MalformedPointError, ValueError):
        return False
