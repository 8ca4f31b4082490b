"""
Tests for action and transaction canonical encoding.
"""

import pytest

from near_client.codec import BorshReader, BorshWriter, keccak256
from near_client.runtime.errors import EncodingError
from near_client.types import (
    AccessKey,
    Action,
    ActionKind,
    AddKey,
    CreateAccount,
    CryptoHash,
    DeleteAccount,
    DeleteKey,
    DeployContract,
    DeployGlobalContract,
    DeterministicAccountStateInit,
    DeterministicStateInit,
    FunctionCall,
    FunctionCallPermission,
    Gas,
    GlobalContractDeployMode,
    GlobalContractIdentifier,
    NearToken,
    SignedTransaction,
    Stake,
    Transaction,
    Transfer,
    UseGlobalContract,
)

BLOCK_HASH = CryptoHash(b"\x11" * 32)


def _decode(data: bytes) -> Action:
    r = BorshReader(data)
    action = Action.decode(r)
    r.expect_eof()
    return action


class TestActionEncoding:
    """Discriminants and field layout."""

    def test_create_account_is_single_byte(self):
        assert CreateAccount().to_bytes() == b"\x00"

    def test_transfer_layout(self):
        data = Transfer(NearToken.near(1)).to_bytes()
        assert data[0] == ActionKind.TRANSFER == 3
        assert int.from_bytes(data[1:], "little") == 10 ** 24
        assert len(data) == 17

    def test_function_call_layout(self):
        action = FunctionCall("set", b'{"v":1}', Gas.tgas(30), NearToken(5))
        w = BorshWriter().u8(2).string("set").bytes(b'{"v":1}').u64(30 * 10 ** 12).u128(5)
        assert action.to_bytes() == w.to_bytes()

    def test_function_call_defaults(self):
        action = FunctionCall("ping")
        assert action.args == b""
        assert action.gas == Gas.DEFAULT
        assert action.deposit.is_zero()

    def test_function_call_key_permission_layout(self, secret_key):
        pk = secret_key.public_key()
        access_key = AccessKey.function_call("app.near", ["a", "b"], NearToken(9))
        expected = BorshWriter().u8(5)
        pk.encode(expected)
        expected.u64(0).u8(0).u8(1).u128(9).string("app.near").vec(["a", "b"], BorshWriter.string)
        assert AddKey(pk, access_key).to_bytes() == expected.to_bytes()

    def test_full_access_key_permission_tag(self, secret_key):
        data = AddKey(secret_key.public_key(), AccessKey.full_access()).to_bytes()
        assert data[-1] == 1

    @pytest.mark.parametrize("factory", [
        lambda pk: CreateAccount(),
        lambda pk: DeployContract(b"\x00asm\x01"),
        lambda pk: FunctionCall("m", b"{}", Gas.tgas(10), NearToken(1)),
        lambda pk: Transfer(NearToken.near(3)),
        lambda pk: Stake(NearToken.near(100), pk),
        lambda pk: AddKey(pk, AccessKey.full_access()),
        lambda pk: AddKey(pk, AccessKey.function_call("c.near", [], None)),
        lambda pk: DeleteKey(pk),
        lambda pk: DeleteAccount("bob.near"),
        lambda pk: DeployGlobalContract(b"code", GlobalContractDeployMode.ACCOUNT_ID),
        lambda pk: UseGlobalContract(GlobalContractIdentifier.by_hash(b"\x01" * 32)),
        lambda pk: UseGlobalContract(GlobalContractIdentifier.by_account("publisher.near")),
        lambda pk: DeterministicStateInit(
            DeterministicAccountStateInit(GlobalContractIdentifier.by_account("p.near"), {b"k": b"v"}),
            NearToken(7),
        ),
    ])
    def test_decode_restores_action(self, secret_key, factory):
        action = factory(secret_key.public_key())
        assert _decode(action.to_bytes()) == action

    def test_highest_discriminant(self):
        state_init = DeterministicAccountStateInit(GlobalContractIdentifier.by_hash(b"\x02" * 32))
        data = DeterministicStateInit(state_init).to_bytes()
        assert data[0] == 11
        assert isinstance(_decode(data), DeterministicStateInit)

    def test_unknown_discriminant(self):
        with pytest.raises(EncodingError, match="discriminant"):
            _decode(b"\x0c")

    def test_truncated_action(self):
        with pytest.raises(EncodingError):
            _decode(Transfer(NearToken(1)).to_bytes()[:-1])

    def test_unknown_permission_tag(self, secret_key):
        data = bytearray(AddKey(secret_key.public_key(), AccessKey.full_access()).to_bytes())
        data[-1] = 9
        with pytest.raises(EncodingError, match="permission"):
            _decode(bytes(data))


class TestDeterministicStateInit:
    """Derived account ids and map ordering."""

    def test_map_written_in_key_order(self):
        code = GlobalContractIdentifier.by_account("p.near")
        a = DeterministicAccountStateInit(code, {b"b": b"2", b"a": b"1"})
        b = DeterministicAccountStateInit(code, {b"a": b"1", b"b": b"2"})
        assert a.to_bytes() == b.to_bytes()

    def test_hashable_inside_transaction(self, secret_key):
        code = GlobalContractIdentifier.by_account("p.near")
        a = DeterministicAccountStateInit(code, {b"b": b"2", b"a": b"1"})
        b = DeterministicAccountStateInit(code, [(b"a", b"1"), (b"b", b"2")])
        assert a == b
        assert hash(a) == hash(b)
        assert a.data == ((b"a", b"1"), (b"b", b"2"))
        assert a.as_dict() == {b"a": b"1", b"b": b"2"}
        tx = Transaction(
            signer_id="alice.test",
            public_key=secret_key.public_key(),
            nonce=1,
            receiver_id="bob.test",
            block_hash=BLOCK_HASH,
            actions=[DeterministicStateInit(a)],
        )
        assert hash(tx) == hash(tx)
        assert len({DeterministicStateInit(a), DeterministicStateInit(b)}) == 1

    def test_derived_account_id(self):
        state_init = DeterministicAccountStateInit(GlobalContractIdentifier.by_account("p.near"))
        account = state_init.derive_account_id()
        assert account == "0s" + keccak256(state_init.to_bytes())[12:32].hex()
        assert len(account) == 42
        assert DeterministicStateInit(state_init).derive_account_id() == account

    def test_identifier_needs_exactly_one(self):
        with pytest.raises(ValueError):
            GlobalContractIdentifier()


class TestTransaction:
    """Transaction layout, hashing and signing."""

    def _transaction(self, secret_key, actions=None):
        return Transaction(
            signer_id="alice.test",
            public_key=secret_key.public_key(),
            nonce=42,
            receiver_id="bob.test",
            block_hash=BLOCK_HASH,
            actions=actions or [Transfer(NearToken.near(1))],
        )

    def test_field_order(self, secret_key):
        tx = self._transaction(secret_key)
        w = BorshWriter().string("alice.test")
        secret_key.public_key().encode(w)
        w.u64(42).string("bob.test").fixed_bytes(BLOCK_HASH).u32(1)
        Transfer(NearToken.near(1)).encode(w)
        assert tx.to_bytes() == w.to_bytes()

    def test_hash_is_sha256_of_encoding(self, secret_key):
        tx = self._transaction(secret_key)
        assert tx.get_hash() == CryptoHash.of(tx.to_bytes())
        tx_hash, size = tx.get_hash_and_size()
        assert tx_hash == tx.get_hash()
        assert size == len(tx.to_bytes())

    def test_decode(self, secret_key):
        tx = self._transaction(secret_key, [CreateAccount(), Transfer(NearToken(5)), FunctionCall("init")])
        assert Transaction.from_bytes(tx.to_bytes()) == tx

    def test_trailing_bytes_rejected(self, secret_key):
        with pytest.raises(EncodingError):
            Transaction.from_bytes(self._transaction(secret_key).to_bytes() + b"\x00")

    def test_signed_transfer_to_bob(self, secret_key):
        tx = self._transaction(secret_key)
        signed = SignedTransaction(tx, secret_key.sign(bytes(tx.get_hash())))

        decoded = SignedTransaction.from_base64(signed.to_base64())
        assert decoded == signed
        assert decoded.transaction.receiver_id == "bob.test"
        (action,) = decoded.transaction.actions
        assert isinstance(action, Transfer)
        assert action.deposit.as_yoctonear() == 10 ** 24
        assert decoded.verify()
        assert secret_key.public_key().verify(bytes(decoded.get_hash()), decoded.signature)

    def test_tampered_signature_fails(self, secret_key):
        tx = self._transaction(secret_key)
        other = self._transaction(secret_key, [Transfer(NearToken.near(2))])
        signed = SignedTransaction(tx, secret_key.sign(bytes(other.get_hash())))
        assert not signed.verify()

    def test_permission_fields_normalized(self):
        permission = FunctionCallPermission("c.near", ["x"], "1 NEAR")
        assert permission.method_names == ("x",)
        assert permission.allowance == NearToken.near(1)
