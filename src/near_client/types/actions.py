"""
Ledger actions and their canonical encoding.

Every action is a frozen dataclass tagged with an explicit ``ActionKind``
discriminant. The numbers are the on-ledger wire contract: new variants get
new numbers, existing ones never move.

Encoding of an action is ``u8(kind) || fields in declaration order``.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import IntEnum
from typing import ClassVar, Dict, Mapping, Optional, Sequence, Tuple, Type, Union

from ..codec import BorshReader, BorshWriter, keccak256
from ..crypto.keys import PublicKey
from ..runtime.errors import EncodingError
from .account import AccountId
from .hash import CryptoHash
from .units import Gas, NearToken


class ActionKind(IntEnum):
    CREATE_ACCOUNT = 0
    DEPLOY_CONTRACT = 1
    FUNCTION_CALL = 2
    TRANSFER = 3
    STAKE = 4
    ADD_KEY = 5
    DELETE_KEY = 6
    DELETE_ACCOUNT = 7
    DELEGATE = 8
    DEPLOY_GLOBAL_CONTRACT = 9
    USE_GLOBAL_CONTRACT = 10
    DETERMINISTIC_STATE_INIT = 11


def _freeze(obj, name: str, value) -> None:
    object.__setattr__(obj, name, value)


# ---------------------------------------------------------------------------
# Access keys
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class FunctionCallPermission:
    """Key limited to calling ``method_names`` (all when empty) on ``receiver_id``."""

    receiver_id: AccountId
    method_names: Tuple[str, ...] = ()
    allowance: Optional[NearToken] = None

    TAG: ClassVar[int] = 0

    def __post_init__(self):
        _freeze(self, "receiver_id", AccountId(self.receiver_id))
        _freeze(self, "method_names", tuple(self.method_names))
        if self.allowance is not None:
            _freeze(self, "allowance", NearToken.coerce(self.allowance))

    def encode(self, w: BorshWriter) -> None:
        w.u8(self.TAG)
        w.option(self.allowance, lambda w_, a: w_.u128(a.value))
        w.string(self.receiver_id)
        w.vec(self.method_names, BorshWriter.string)


@dataclass(frozen=True)
class FullAccessPermission:
    TAG: ClassVar[int] = 1

    def encode(self, w: BorshWriter) -> None:
        w.u8(self.TAG)


AccessKeyPermission = Union[FunctionCallPermission, FullAccessPermission]


def _decode_permission(r: BorshReader) -> AccessKeyPermission:
    tag = r.u8()
    if tag == FunctionCallPermission.TAG:
        allowance = r.option(lambda r_: NearToken(r_.u128()))
        receiver_id = AccountId(r.string())
        method_names = tuple(r.vec(BorshReader.string))
        return FunctionCallPermission(receiver_id, method_names, allowance)
    if tag == FullAccessPermission.TAG:
        return FullAccessPermission()
    raise EncodingError(f"Unknown access key permission tag: {tag}")


@dataclass(frozen=True)
class AccessKey:
    nonce: int
    permission: AccessKeyPermission

    @classmethod
    def full_access(cls) -> AccessKey:
        return cls(0, FullAccessPermission())

    @classmethod
    def function_call(cls, receiver_id: str, method_names: Sequence[str] = (),
                      allowance: Optional[NearToken] = None) -> AccessKey:
        return cls(0, FunctionCallPermission(receiver_id, tuple(method_names), allowance))

    def encode(self, w: BorshWriter) -> None:
        w.u64(self.nonce)
        self.permission.encode(w)

    @classmethod
    def decode(cls, r: BorshReader) -> AccessKey:
        return cls(r.u64(), _decode_permission(r))


# ---------------------------------------------------------------------------
# Global contracts and deterministic state init
# ---------------------------------------------------------------------------

class GlobalContractDeployMode(IntEnum):
    """How a published contract is referenced: by code hash (immutable) or by publisher."""

    CODE_HASH = 0
    ACCOUNT_ID = 1


@dataclass(frozen=True)
class GlobalContractIdentifier:
    """Reference to a published contract: exactly one of code_hash or account_id."""

    code_hash: Optional[CryptoHash] = None
    account_id: Optional[AccountId] = None

    def __post_init__(self):
        if (self.code_hash is None) == (self.account_id is None):
            raise ValueError("GlobalContractIdentifier needs exactly one of code_hash or account_id")
        if self.code_hash is not None:
            _freeze(self, "code_hash", CryptoHash.coerce(self.code_hash))
        else:
            _freeze(self, "account_id", AccountId(self.account_id))

    @classmethod
    def by_hash(cls, code_hash: Union[str, bytes]) -> GlobalContractIdentifier:
        return cls(code_hash=CryptoHash.coerce(code_hash))

    @classmethod
    def by_account(cls, account_id: str) -> GlobalContractIdentifier:
        return cls(account_id=AccountId(account_id))

    def encode(self, w: BorshWriter) -> None:
        if self.code_hash is not None:
            w.u8(GlobalContractDeployMode.CODE_HASH)
            self.code_hash.encode(w)
        else:
            w.u8(GlobalContractDeployMode.ACCOUNT_ID)
            w.string(self.account_id)

    @classmethod
    def decode(cls, r: BorshReader) -> GlobalContractIdentifier:
        tag = r.u8()
        if tag == GlobalContractDeployMode.CODE_HASH:
            return cls(code_hash=CryptoHash.decode(r))
        if tag == GlobalContractDeployMode.ACCOUNT_ID:
            return cls(account_id=AccountId(r.string()))
        raise EncodingError(f"Unknown global contract identifier tag: {tag}")


@dataclass(frozen=True)
class DeterministicAccountStateInit:
    """
    Initial state of a deterministic account (version 1).

    ``data`` accepts a mapping or key/value pairs and is stored as a tuple of
    pairs sorted by key bytes, the order the map is written in.
    """

    code: GlobalContractIdentifier
    data: Tuple[Tuple[bytes, bytes], ...] = ()

    VERSION: ClassVar[int] = 0

    def __post_init__(self):
        pairs = self.data.items() if isinstance(self.data, Mapping) else self.data
        entries = {bytes(k): bytes(v) for k, v in pairs}
        _freeze(self, "data", tuple(sorted(entries.items())))

    def as_dict(self) -> Dict[bytes, bytes]:
        return dict(self.data)

    def encode(self, w: BorshWriter) -> None:
        w.u8(self.VERSION)
        self.code.encode(w)
        w.u32(len(self.data))
        for key, value in self.data:
            w.bytes(key)
            w.bytes(value)

    @classmethod
    def decode(cls, r: BorshReader) -> DeterministicAccountStateInit:
        version = r.u8()
        if version != cls.VERSION:
            raise EncodingError(f"Unknown state init version: {version}")
        code = GlobalContractIdentifier.decode(r)
        data: Dict[bytes, bytes] = {}
        for _ in range(r.u32()):
            key = r.bytes()
            data[key] = r.bytes()
        return cls(code, data)

    def to_bytes(self) -> bytes:
        w = BorshWriter()
        self.encode(w)
        return w.to_bytes()

    def derive_account_id(self) -> AccountId:
        """``"0s"`` followed by the hex of the last 20 bytes of keccak256(encoding)."""
        return AccountId("0s" + keccak256(self.to_bytes())[12:32].hex())


# ---------------------------------------------------------------------------
# Actions
# ---------------------------------------------------------------------------

class Action:
    """Base of the closed action set."""

    KIND: ClassVar[ActionKind]

    def encode(self, w: BorshWriter) -> None:
        w.u8(self.KIND)
        self._encode_fields(w)

    def _encode_fields(self, w: BorshWriter) -> None:
        raise NotImplementedError

    @classmethod
    def _decode_fields(cls, r: BorshReader) -> Action:
        raise NotImplementedError

    def to_bytes(self) -> bytes:
        w = BorshWriter()
        self.encode(w)
        return w.to_bytes()

    @staticmethod
    def decode(r: BorshReader) -> Action:
        tag = r.u8()
        try:
            kind = ActionKind(tag)
        except ValueError:
            raise EncodingError(f"Unknown action discriminant: {tag}")
        if kind is ActionKind.DELEGATE:
            from .delegate import Delegate

            return Delegate._decode_fields(r)
        return _ACTION_TYPES[kind]._decode_fields(r)


@dataclass(frozen=True)
class CreateAccount(Action):
    KIND: ClassVar[ActionKind] = ActionKind.CREATE_ACCOUNT

    def _encode_fields(self, w: BorshWriter) -> None:
        pass

    @classmethod
    def _decode_fields(cls, r: BorshReader) -> CreateAccount:
        return cls()


@dataclass(frozen=True)
class DeployContract(Action):
    code: bytes

    KIND: ClassVar[ActionKind] = ActionKind.DEPLOY_CONTRACT

    def _encode_fields(self, w: BorshWriter) -> None:
        w.bytes(self.code)

    @classmethod
    def _decode_fields(cls, r: BorshReader) -> DeployContract:
        return cls(r.bytes())

    def __repr__(self) -> str:
        return f"DeployContract(code=<{len(self.code)} bytes>)"


@dataclass(frozen=True)
class FunctionCall(Action):
    method_name: str
    args: bytes = b""
    gas: Gas = Gas.DEFAULT
    deposit: NearToken = NearToken(0)

    KIND: ClassVar[ActionKind] = ActionKind.FUNCTION_CALL

    def __post_init__(self):
        _freeze(self, "args", bytes(self.args))
        _freeze(self, "gas", Gas.coerce(self.gas))
        _freeze(self, "deposit", NearToken.coerce(self.deposit))

    def _encode_fields(self, w: BorshWriter) -> None:
        w.string(self.method_name)
        w.bytes(self.args)
        w.u64(self.gas.value)
        w.u128(self.deposit.value)

    @classmethod
    def _decode_fields(cls, r: BorshReader) -> FunctionCall:
        return cls(r.string(), r.bytes(), Gas(r.u64()), NearToken(r.u128()))


@dataclass(frozen=True)
class Transfer(Action):
    deposit: NearToken

    KIND: ClassVar[ActionKind] = ActionKind.TRANSFER

    def __post_init__(self):
        _freeze(self, "deposit", NearToken.coerce(self.deposit))

    def _encode_fields(self, w: BorshWriter) -> None:
        w.u128(self.deposit.value)

    @classmethod
    def _decode_fields(cls, r: BorshReader) -> Transfer:
        return cls(NearToken(r.u128()))


@dataclass(frozen=True)
class Stake(Action):
    stake: NearToken
    public_key: PublicKey

    KIND: ClassVar[ActionKind] = ActionKind.STAKE

    def __post_init__(self):
        _freeze(self, "stake", NearToken.coerce(self.stake))
        _freeze(self, "public_key", PublicKey.coerce(self.public_key))

    def _encode_fields(self, w: BorshWriter) -> None:
        w.u128(self.stake.value)
        self.public_key.encode(w)

    @classmethod
    def _decode_fields(cls, r: BorshReader) -> Stake:
        return cls(NearToken(r.u128()), PublicKey.decode(r))


@dataclass(frozen=True)
class AddKey(Action):
    public_key: PublicKey
    access_key: AccessKey

    KIND: ClassVar[ActionKind] = ActionKind.ADD_KEY

    def __post_init__(self):
        _freeze(self, "public_key", PublicKey.coerce(self.public_key))

    def _encode_fields(self, w: BorshWriter) -> None:
        self.public_key.encode(w)
        self.access_key.encode(w)

    @classmethod
    def _decode_fields(cls, r: BorshReader) -> AddKey:
        return cls(PublicKey.decode(r), AccessKey.decode(r))


@dataclass(frozen=True)
class DeleteKey(Action):
    public_key: PublicKey

    KIND: ClassVar[ActionKind] = ActionKind.DELETE_KEY

    def __post_init__(self):
        _freeze(self, "public_key", PublicKey.coerce(self.public_key))

    def _encode_fields(self, w: BorshWriter) -> None:
        self.public_key.encode(w)

    @classmethod
    def _decode_fields(cls, r: BorshReader) -> DeleteKey:
        return cls(PublicKey.decode(r))


@dataclass(frozen=True)
class DeleteAccount(Action):
    beneficiary_id: AccountId

    KIND: ClassVar[ActionKind] = ActionKind.DELETE_ACCOUNT

    def __post_init__(self):
        _freeze(self, "beneficiary_id", AccountId(self.beneficiary_id))

    def _encode_fields(self, w: BorshWriter) -> None:
        w.string(self.beneficiary_id)

    @classmethod
    def _decode_fields(cls, r: BorshReader) -> DeleteAccount:
        return cls(AccountId(r.string()))


@dataclass(frozen=True)
class DeployGlobalContract(Action):
    """Publish code once so other accounts can use it without re-uploading."""

    code: bytes
    deploy_mode: GlobalContractDeployMode = GlobalContractDeployMode.CODE_HASH

    KIND: ClassVar[ActionKind] = ActionKind.DEPLOY_GLOBAL_CONTRACT

    def __post_init__(self):
        _freeze(self, "deploy_mode", GlobalContractDeployMode(self.deploy_mode))

    def _encode_fields(self, w: BorshWriter) -> None:
        w.bytes(self.code)
        w.u8(self.deploy_mode)

    @classmethod
    def _decode_fields(cls, r: BorshReader) -> DeployGlobalContract:
        code = r.bytes()
        mode = r.u8()
        try:
            return cls(code, GlobalContractDeployMode(mode))
        except ValueError:
            raise EncodingError(f"Unknown global contract deploy mode: {mode}")

    def __repr__(self) -> str:
        return f"DeployGlobalContract(code=<{len(self.code)} bytes>, deploy_mode={self.deploy_mode.name})"


@dataclass(frozen=True)
class UseGlobalContract(Action):
    contract_identifier: GlobalContractIdentifier

    KIND: ClassVar[ActionKind] = ActionKind.USE_GLOBAL_CONTRACT

    def _encode_fields(self, w: BorshWriter) -> None:
        self.contract_identifier.encode(w)

    @classmethod
    def _decode_fields(cls, r: BorshReader) -> UseGlobalContract:
        return cls(GlobalContractIdentifier.decode(r))


@dataclass(frozen=True)
class DeterministicStateInit(Action):
    state_init: DeterministicAccountStateInit
    deposit: NearToken = NearToken(0)

    KIND: ClassVar[ActionKind] = ActionKind.DETERMINISTIC_STATE_INIT

    def __post_init__(self):
        _freeze(self, "deposit", NearToken.coerce(self.deposit))

    def _encode_fields(self, w: BorshWriter) -> None:
        self.state_init.encode(w)
        w.u128(self.deposit.value)

    @classmethod
    def _decode_fields(cls, r: BorshReader) -> DeterministicStateInit:
        return cls(DeterministicAccountStateInit.decode(r), NearToken(r.u128()))

    def derive_account_id(self) -> AccountId:
        return self.state_init.derive_account_id()


_ACTION_TYPES: Dict[ActionKind, Type[Action]] = {
    cls.KIND: cls
    for cls in (
        CreateAccount,
        DeployContract,
        FunctionCall,
        Transfer,
        Stake,
        AddKey,
        DeleteKey,
        DeleteAccount,
        DeployGlobalContract,
        UseGlobalContract,
        DeterministicStateInit,
    )
}
