"""
Tests for BIP-39 seed phrases and SLIP-10 Ed25519 derivation.
"""

import pytest

from near_client.crypto import KeyPair, derive_ed25519_key, generate_seed_phrase, seed_phrase_to_seed
from near_client.crypto.hd import normalize_seed_phrase, parse_hd_path
from near_client.runtime.errors import InvalidSeedPhraseError, KeyDerivationError

TEST_PHRASE = "abandon abandon abandon abandon abandon abandon abandon abandon abandon abandon abandon about"


class TestSeedPhrase:
    """Phrase validation and key derivation."""

    def test_same_phrase_same_key(self):
        assert KeyPair.from_seed_phrase(TEST_PHRASE).public_key == \
            KeyPair.from_seed_phrase(TEST_PHRASE).public_key

    def test_normalization(self):
        messy = "  ABANDON abandon\tabandon abandon abandon abandon abandon abandon abandon abandon abandon   About "
        assert normalize_seed_phrase(messy) == TEST_PHRASE
        assert KeyPair.from_seed_phrase(messy).public_key == KeyPair.from_seed_phrase(TEST_PHRASE).public_key

    def test_different_path_different_key(self):
        default = KeyPair.from_seed_phrase(TEST_PHRASE)
        other = KeyPair.from_seed_phrase(TEST_PHRASE, hd_path="m/44'/397'/1'")
        assert default.public_key != other.public_key

    def test_passphrase_changes_key(self):
        assert KeyPair.from_seed_phrase(TEST_PHRASE).public_key != \
            KeyPair.from_seed_phrase(TEST_PHRASE, passphrase="secret").public_key

    def test_bip39_seed_vector(self):
        seed = seed_phrase_to_seed(TEST_PHRASE, "TREZOR")
        assert seed.hex() == (
            "c55257c360c07c72029aebc1b53c05ed0362ada38ead3e3e9efa3708e5349553"
            "1f09a6987599d18264c1e1c92f2cf141630c7a3c4ab7c81b2f001698e7463b04"
        )

    @pytest.mark.parametrize("word_count", [12, 24])
    def test_generated_phrase_rederives(self, word_count):
        phrase, key_pair = generate_seed_phrase(word_count)
        assert len(phrase.split()) == word_count
        assert KeyPair.from_seed_phrase(phrase).public_key == key_pair.public_key

    def test_wrong_word_count(self):
        with pytest.raises(InvalidSeedPhraseError, match="words"):
            seed_phrase_to_seed("abandon abandon abandon")

    def test_bad_checksum(self):
        with pytest.raises(InvalidSeedPhraseError):
            seed_phrase_to_seed(" ".join(["abandon"] * 12))

    def test_unknown_word(self):
        with pytest.raises(InvalidSeedPhraseError):
            seed_phrase_to_seed(TEST_PHRASE.replace("about", "zzzzz"))

    def test_generate_rejects_bad_count(self):
        with pytest.raises(InvalidSeedPhraseError):
            generate_seed_phrase(13)


class TestSlip10:
    """Hardened derivation against the SLIP-10 Ed25519 vector 1."""

    SEED = bytes.fromhex("000102030405060708090a0b0c0d0e0f")

    def test_master_key(self):
        assert derive_ed25519_key(self.SEED, "m").hex() == \
            "2b4be7f19ee27bbf30c667b642d5f4aa69fd169872f8fc3059c08ebae2eb19e7"

    def test_first_hardened_child(self):
        assert derive_ed25519_key(self.SEED, "m/0'").hex() == \
            "68e0fe46dfb67e368c75379acec591dad19df3cde26e63b93a8e704f1dade7a3"

    def test_non_hardened_rejected(self):
        with pytest.raises(KeyDerivationError, match="Non-hardened"):
            parse_hd_path("m/44'/397'/0")

    def test_malformed_path(self):
        with pytest.raises(KeyDerivationError):
            parse_hd_path("44'/397'")
        with pytest.raises(KeyDerivationError):
            parse_hd_path("m/x'")
