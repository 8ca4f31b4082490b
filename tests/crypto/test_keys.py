"""
Tests for key, signature and key pair types.
"""

import pytest
from ecdsa import SECP256k1, SigningKey
from ecdsa.util import sigencode_string

from near_client.codec import BorshReader, BorshWriter, sha256
from near_client.crypto.keys import KeyPair, KeyType, PublicKey, SecretKey, Signature, verify
from near_client.runtime.errors import EncodingError, ParseKeyError

SECP_GENERATOR = bytes.fromhex("0279be667ef9dcbbac55a06295ce870b07029bfcdb2dce28d959f2815b16f81798")


class TestPublicKey:
    """Parsing, text form and wire form."""

    def test_text_round_trip(self, secret_key):
        pk = secret_key.public_key()
        text = str(pk)
        assert text.startswith("ed25519:")
        assert PublicKey.from_string(text) == pk

    def test_wire_form_is_tag_then_bytes(self, secret_key):
        pk = secret_key.public_key()
        w = BorshWriter()
        pk.encode(w)
        data = w.to_bytes()
        assert data[0] == 0
        assert data[1:] == pk.data
        assert PublicKey.decode(BorshReader(data)) == pk

    def test_wrong_length_rejected(self):
        with pytest.raises(ParseKeyError, match="length"):
            PublicKey(KeyType.ED25519, b"\x01" * 31)

    def test_unknown_prefix_rejected(self):
        with pytest.raises(ParseKeyError, match="Unknown key type"):
            PublicKey.from_string("rsa:abc")

    def test_missing_prefix_rejected(self):
        with pytest.raises(ParseKeyError):
            PublicKey.from_string("DcA2MzgpJbrUATQLLceocVckhhAqrkingax4oJ9kZ847")

    def test_unknown_wire_tag(self):
        with pytest.raises(EncodingError, match="key type tag"):
            PublicKey.decode(BorshReader(b"\x07" + b"\x00" * 32))

    def test_secp256k1_point(self):
        pk = PublicKey(KeyType.SECP256K1, SECP_GENERATOR)
        assert str(pk).startswith("secp256k1:")
        assert PublicKey.from_string(str(pk)) == pk

    def test_secp256k1_bad_prefix(self):
        with pytest.raises(ParseKeyError):
            PublicKey(KeyType.SECP256K1, b"\x05" + SECP_GENERATOR[1:])

    def test_hashable(self, secret_key):
        pk = secret_key.public_key()
        assert len({pk, PublicKey.from_string(str(pk))}) == 1


class TestSecretKey:
    """Signing and masking."""

    def test_sign_and_verify(self, secret_key):
        message = b"hello"
        signature = secret_key.sign(message)
        assert signature.key_type is KeyType.ED25519
        assert len(signature.data) == 64
        assert secret_key.public_key().verify(message, signature)
        assert verify(signature, message, secret_key.public_key())

    def test_signing_is_deterministic(self, secret_key):
        assert secret_key.sign(b"m") == secret_key.sign(b"m")

    def test_tampered_message_fails(self, secret_key):
        signature = secret_key.sign(b"hello")
        assert not secret_key.public_key().verify(b"hellp", signature)

    @pytest.mark.parametrize("offset", [0, 31, 32, 63])
    def test_flipped_signature_bit_fails(self, secret_key, offset):
        signature = secret_key.sign(b"hello")
        mutated = bytearray(signature.data)
        mutated[offset] ^= 0x01
        assert not secret_key.public_key().verify(b"hello", Signature(KeyType.ED25519, bytes(mutated)))

    @pytest.mark.parametrize("offset", [0, 2, 4])
    def test_flipped_message_bit_fails(self, secret_key, offset):
        signature = secret_key.sign(b"hello")
        mutated = bytearray(b"hello")
        mutated[offset] ^= 0x80
        assert not secret_key.public_key().verify(bytes(mutated), signature)

    def test_expanded_form_uses_seed(self, secret_key):
        expanded = SecretKey(secret_key.to_bytes())
        assert expanded == secret_key
        assert expanded.public_key() == secret_key.public_key()

    def test_text_round_trip(self, secret_key):
        assert SecretKey.from_string(secret_key.to_string()) == secret_key

    def test_repr_masks_secret(self, secret_key):
        assert secret_key.to_string() not in repr(secret_key)
        assert "***" in repr(secret_key)
        assert "***" in str(secret_key)
        assert "***" in repr(KeyPair(secret_key))

    def test_bad_length(self):
        with pytest.raises(ParseKeyError):
            SecretKey(b"\x00" * 16)

    def test_generate_is_random(self):
        assert SecretKey.generate() != SecretKey.generate()


class TestSignature:
    """Signature text/wire forms and curve mismatches."""

    def test_text_round_trip(self, secret_key):
        signature = secret_key.sign(b"x")
        assert Signature.from_string(str(signature)) == signature

    def test_wire_round_trip(self, secret_key):
        signature = secret_key.sign(b"x")
        w = BorshWriter()
        signature.encode(w)
        assert Signature.decode(BorshReader(w.to_bytes())) == signature

    def test_wrong_length(self):
        with pytest.raises(ParseKeyError):
            Signature(KeyType.ED25519, b"\x00" * 65)

    def test_curve_mismatch_is_false(self, secret_key):
        secp_signature = Signature(KeyType.SECP256K1, b"\x01" * 65)
        assert not secret_key.public_key().verify(b"x", secp_signature)

    def test_secp256k1_verification(self):
        sk = SigningKey.from_secret_exponent(12345, curve=SECP256k1)
        compressed = sk.get_verifying_key().to_string("compressed")
        digest = sha256(b"payload")
        raw = sk.sign_digest_deterministic(digest, sigencode=sigencode_string)
        signature = Signature(KeyType.SECP256K1, raw + b"\x00")
        pk = PublicKey(KeyType.SECP256K1, compressed)
        assert pk.verify(digest, signature)
        assert not pk.verify(sha256(b"other"), signature)
