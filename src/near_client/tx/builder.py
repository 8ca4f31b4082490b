"""
Transaction builder.

Accumulates an ordered list of actions for one receiver and turns it into
either a submitted transaction (``send``) or a signed delegate action for a
relayer (``delegate``). All actions of one transaction apply atomically.

Example:
    ```python
    outcome = await (
        near.transaction("counter.testnet")
        .call("increment").args({"by": 2}).gas("50 Tgas")
        .transfer("1 NEAR")
        .send()
    )
    ```
"""

from __future__ import annotations
import json
import logging
from dataclasses import dataclass
from typing import Any, List, Mapping, Optional, Sequence, Union

from ..crypto.keys import PublicKey
from ..nonce_manager import NonceManager
from ..runtime.errors import (
    InvalidNonceError,
    NoSignerError,
    TransactionBuildError,
    TransactionFailedError,
)
from ..signers.signer import ClaimedKey, Signer
from ..types.account import AccountId
from ..types.actions import (
    AccessKey,
    Action,
    AddKey,
    CreateAccount,
    DeleteAccount,
    DeleteKey,
    DeployContract,
    DeployGlobalContract,
    DeterministicAccountStateInit,
    DeterministicStateInit,
    FunctionCall,
    GlobalContractDeployMode,
    GlobalContractIdentifier,
    Stake,
    Transfer,
    UseGlobalContract,
)
from ..types.block_reference import BlockReference, TxExecutionStatus
from ..types.delegate import Delegate, DelegateAction, SignedDelegateAction
from ..types.hash import CryptoHash
from ..types.transaction import SignedTransaction, Transaction
from ..types.units import Gas, NearToken
from ..types.views import FinalExecutionOutcome

logger = logging.getLogger(__name__)

MAX_NONCE_RETRIES = 3
DEFAULT_BLOCK_HEIGHT_OFFSET = 200

AmountLike = Union[str, int, NearToken]
GasLike = Union[str, int, Gas]


@dataclass
class DelegateOptions:
    """
    Settings for ``TransactionBuilder.delegate``.

    Attributes:
        max_block_height: Absolute expiry height; defaults to the latest
            height plus ``block_height_offset``
        block_height_offset: Blocks until expiry when no height is given
        nonce: Explicit nonce; defaults to the access key nonce + 1
    """
    max_block_height: Optional[int] = None
    block_height_offset: int = DEFAULT_BLOCK_HEIGHT_OFFSET
    nonce: Optional[int] = None

    @classmethod
    def with_offset(cls, offset: int) -> DelegateOptions:
        return cls(block_height_offset=offset)

    @classmethod
    def with_max_height(cls, height: int) -> DelegateOptions:
        return cls(max_block_height=height)


@dataclass(frozen=True)
class DelegateResult:
    """Signed delegate action plus its base64 transport form."""
    signed_delegate_action: SignedDelegateAction
    payload: str

    def to_bytes(self) -> bytes:
        return self.signed_delegate_action.to_bytes()

    @property
    def sender_id(self) -> AccountId:
        return self.signed_delegate_action.sender_id

    @property
    def receiver_id(self) -> AccountId:
        return self.signed_delegate_action.receiver_id


class TransactionBuilder:
    """
    Chainable builder for a multi-action transaction.

    Every action method appends to the list and returns the builder.
    """

    def __init__(
        self,
        rpc,
        signer: Optional[Signer],
        nonce_manager: NonceManager,
        receiver_id: Union[str, AccountId],
        wait_until: TxExecutionStatus = TxExecutionStatus.EXECUTED_OPTIMISTIC,
    ):
        """
        Initialize the builder.

        Args:
            rpc: ``RpcClient`` used for nonce, block hash and submission
            signer: Default signer, may be None if ``sign_with`` is used
            nonce_manager: Nonce cache shared with other builders of the client
            receiver_id: Account the actions apply to
            wait_until: Default wait level for ``send``
        """
        self.rpc = rpc
        self.nonce_manager = nonce_manager
        self.receiver_id = AccountId(receiver_id)
        self._signer = signer
        self._signer_override: Optional[Signer] = None
        self._wait_until = TxExecutionStatus(wait_until)
        self._actions: List[Action] = []

    @property
    def actions(self) -> List[Action]:
        return list(self._actions)

    @property
    def signer(self) -> Optional[Signer]:
        return self._signer_override or self._signer

    def _push(self, action: Action) -> TransactionBuilder:
        self._actions.append(action)
        return self

    # =========================================================================
    # Actions
    # =========================================================================

    def create_account(self) -> TransactionBuilder:
        return self._push(CreateAccount())

    def transfer(self, amount: AmountLike) -> TransactionBuilder:
        return self._push(Transfer(NearToken.coerce(amount)))

    def deploy(self, code: bytes) -> TransactionBuilder:
        return self._push(DeployContract(bytes(code)))

    def call(self, method_name: str) -> CallBuilder:
        """
        Start a function call; configure it on the returned ``CallBuilder``.

        Defaults: no arguments, 30 Tgas, zero deposit.
        """
        return CallBuilder(self, method_name)

    def add_full_access_key(self, public_key: Union[str, PublicKey]) -> TransactionBuilder:
        return self._push(AddKey(PublicKey.coerce(public_key), AccessKey.full_access()))

    def add_function_call_key(
        self,
        public_key: Union[str, PublicKey],
        receiver_id: Union[str, AccountId],
        method_names: Sequence[str] = (),
        allowance: Optional[AmountLike] = None,
    ) -> TransactionBuilder:
        """
        Add a key restricted to calling ``receiver_id``.

        Args:
            public_key: Key to add
            receiver_id: Only contract the key may call
            method_names: Allowed methods; empty allows any
            allowance: Gas fee budget; None means unlimited
        """
        allowance = NearToken.coerce(allowance) if allowance is not None else None
        access_key = AccessKey.function_call(AccountId(receiver_id), method_names, allowance)
        return self._push(AddKey(PublicKey.coerce(public_key), access_key))

    def delete_key(self, public_key: Union[str, PublicKey]) -> TransactionBuilder:
        return self._push(DeleteKey(PublicKey.coerce(public_key)))

    def delete_account(self, beneficiary_id: Union[str, AccountId]) -> TransactionBuilder:
        return self._push(DeleteAccount(AccountId(beneficiary_id)))

    def stake(self, amount: AmountLike, public_key: Union[str, PublicKey]) -> TransactionBuilder:
        return self._push(Stake(NearToken.coerce(amount), PublicKey.coerce(public_key)))

    def signed_delegate_action(self, signed_delegate: SignedDelegateAction) -> TransactionBuilder:
        """Wrap a user's signed delegate action for relaying."""
        return self._push(Delegate(signed_delegate))

    def publish_contract(self, code: bytes, by_hash: bool = True) -> TransactionBuilder:
        """
        Publish code as a global contract.

        Args:
            code: Contract WASM
            by_hash: Reference it by code hash (immutable) rather than by
                this account (upgradable)
        """
        mode = GlobalContractDeployMode.CODE_HASH if by_hash else GlobalContractDeployMode.ACCOUNT_ID
        return self._push(DeployGlobalContract(bytes(code), mode))

    def deploy_from_hash(self, code_hash: Union[str, bytes, CryptoHash]) -> TransactionBuilder:
        return self._push(UseGlobalContract(GlobalContractIdentifier.by_hash(code_hash)))

    def deploy_from_publisher(self, publisher_id: Union[str, AccountId]) -> TransactionBuilder:
        return self._push(UseGlobalContract(GlobalContractIdentifier.by_account(publisher_id)))

    def state_init_by_hash(self, code_hash: Union[str, bytes, CryptoHash],
                           data: Optional[Mapping[bytes, bytes]] = None,
                           deposit: AmountLike = 0) -> TransactionBuilder:
        state_init = DeterministicAccountStateInit(GlobalContractIdentifier.by_hash(code_hash),
                                                   dict(data or {}))
        return self._push(DeterministicStateInit(state_init, NearToken.coerce(deposit)))

    def state_init_by_publisher(self, publisher_id: Union[str, AccountId],
                                data: Optional[Mapping[bytes, bytes]] = None,
                                deposit: AmountLike = 0) -> TransactionBuilder:
        state_init = DeterministicAccountStateInit(GlobalContractIdentifier.by_account(publisher_id),
                                                   dict(data or {}))
        return self._push(DeterministicStateInit(state_init, NearToken.coerce(deposit)))

    # =========================================================================
    # Configuration
    # =========================================================================

    def sign_with(self, signer: Signer) -> TransactionBuilder:
        """Use ``signer`` instead of the client's default signer."""
        self._signer_override = signer
        return self

    def wait_until(self, status: Union[str, TxExecutionStatus]) -> TransactionBuilder:
        self._wait_until = TxExecutionStatus(status)
        return self

    # =========================================================================
    # Build, send, delegate
    # =========================================================================

    def _require_signer(self) -> Signer:
        signer = self.signer
        if signer is None:
            raise NoSignerError()
        return signer

    def _require_actions(self) -> None:
        if not self._actions:
            raise TransactionBuildError("Transaction must have at least one action")

    def build(self, public_key: Union[str, PublicKey], nonce: int,
              block_hash: Union[str, bytes, CryptoHash]) -> Transaction:
        """
        Assemble the unsigned transaction without touching the network.

        Raises:
            NoSignerError: If no signer is configured
            TransactionBuildError: If there are no actions
        """
        self._require_actions()
        signer = self._require_signer()
        return Transaction(
            signer_id=signer.account_id,
            public_key=PublicKey.coerce(public_key),
            nonce=nonce,
            receiver_id=self.receiver_id,
            block_hash=CryptoHash.coerce(block_hash),
            actions=tuple(self._actions),
        )

    async def _fetch_nonce(self, signer: Signer, key: ClaimedKey) -> int:
        access_key = await self.rpc.view_access_key(signer.account_id, key.public_key,
                                                    BlockReference.optimistic())
        return access_key.nonce

    async def send(self) -> FinalExecutionOutcome:
        """
        Sign and submit the transaction.

        Nonce rejections are retried with a reconciled nonce, re-signing each
        time; every other error propagates.

        Returns:
            Outcome at the configured wait level

        Raises:
            TransactionBuildError: If there are no actions
            NoSignerError: If no signer is configured
            TransactionFailedError: If the outcome reports a failure
            RpcError: If submission fails
        """
        self._require_actions()
        signer = self._require_signer()
        account_id = signer.account_id
        key = signer.claim_key()
        pending_nonce: Optional[int] = None

        for attempt in range(MAX_NONCE_RETRIES):
            if pending_nonce is not None:
                nonce = pending_nonce
            else:
                nonce = await self.nonce_manager.get_next_nonce(
                    account_id, key.public_key, lambda: self._fetch_nonce(signer, key)
                )
            block = await self.rpc.block(BlockReference.final())

            tx = self.build(key.public_key, nonce, block.header.block_hash)
            signed = SignedTransaction(tx, key.sign(bytes(tx.get_hash())))
            logger.debug(f"Submitting {len(tx.actions)} action(s) {account_id} -> "
                         f"{self.receiver_id} with nonce {nonce}")

            try:
                outcome = await self.rpc.send_tx(signed, self._wait_until)
            except InvalidNonceError as e:
                if attempt + 1 >= MAX_NONCE_RETRIES:
                    raise
                logger.warning(f"Nonce {e.tx_nonce} rejected (access key nonce {e.ak_nonce}), "
                               f"retrying with a fresh nonce")
                if e.ak_nonce is None:
                    self.nonce_manager.invalidate(account_id, key.public_key)
                    pending_nonce = None
                else:
                    pending_nonce = self.nonce_manager.update_and_get_next(
                        account_id, key.public_key, e.ak_nonce
                    )
                continue

            if outcome.is_failure():
                raise TransactionFailedError(outcome.failure_message() or "unknown failure", outcome)
            return outcome

        # unreachable: the last attempt either returns or raises
        raise TransactionBuildError("Transaction send loop exhausted")

    async def delegate(self, options: Optional[DelegateOptions] = None) -> DelegateResult:
        """
        Sign the actions as a delegate action for a relayer to submit.

        Args:
            options: Expiry and nonce overrides

        Returns:
            DelegateResult with the signed action and its base64 payload

        Raises:
            TransactionBuildError: If there are no actions or one is itself
                a delegate action
            NoSignerError: If no signer is configured
        """
        options = options or DelegateOptions()
        if not self._actions:
            raise TransactionBuildError("Delegate action requires at least one action")
        if any(isinstance(a, Delegate) for a in self._actions):
            raise TransactionBuildError(
                "Delegate actions cannot contain nested signed delegate actions"
            )
        signer = self._require_signer()
        key = signer.claim_key()

        if options.nonce is not None:
            nonce = options.nonce
        else:
            nonce = await self._fetch_nonce(signer, key) + 1

        if options.max_block_height is not None:
            max_block_height = options.max_block_height
        else:
            status = await self.rpc.status()
            max_block_height = status.sync_info.latest_block_height + options.block_height_offset

        delegate_action = DelegateAction(
            sender_id=signer.account_id,
            receiver_id=self.receiver_id,
            actions=tuple(self._actions),
            nonce=nonce,
            max_block_height=max_block_height,
            public_key=key.public_key,
        )
        signature = key.sign(bytes(delegate_action.get_hash()))
        signed = SignedDelegateAction(delegate_action, signature)
        logger.debug(f"Signed delegate action {signer.account_id} -> {self.receiver_id}, "
                     f"expires at height {max_block_height}")
        return DelegateResult(signed_delegate_action=signed, payload=signed.to_base64())

    def __repr__(self) -> str:
        return f"TransactionBuilder(receiver={self.receiver_id!r}, actions={len(self._actions)})"


class CallBuilder:
    """
    Configures one function call of a ``TransactionBuilder``.

    The call is appended immediately; ``args``/``gas``/``deposit`` rewrite it
    in place. Any other attribute (``transfer``, ``send``, ``call``, ...) is
    looked up on the parent builder, so chaining continues naturally.
    """

    def __init__(self, builder: TransactionBuilder, method_name: str):
        self._builder = builder
        self._index = len(builder._actions)
        builder._push(FunctionCall(method_name))

    @property
    def action(self) -> FunctionCall:
        return self._builder._actions[self._index]

    def _update(self, **changes: Any) -> CallBuilder:
        current = self.action
        fields = {"method_name": current.method_name, "args": current.args,
                  "gas": current.gas, "deposit": current.deposit}
        fields.update(changes)
        self._builder._actions[self._index] = FunctionCall(**fields)
        return self

    def args(self, value: Any) -> CallBuilder:
        """JSON-encode ``value`` as the call arguments."""
        return self._update(args=json.dumps(value, separators=(",", ":")).encode("utf-8"))

    def args_raw(self, value: bytes) -> CallBuilder:
        return self._update(args=bytes(value))

    def gas(self, gas: GasLike) -> CallBuilder:
        return self._update(gas=Gas.coerce(gas))

    def deposit(self, amount: AmountLike) -> CallBuilder:
        return self._update(deposit=NearToken.coerce(amount))

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            raise AttributeError(name)
        return getattr(self._builder, name)

    def __repr__(self) -> str:
        return f"CallBuilder({self.action.method_name!r})"
