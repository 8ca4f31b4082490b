"""
Ledger value types: identifiers, units, actions, transactions and RPC views.
"""

from .account import AccountId
from .actions import (
    AccessKey,
    AccessKeyPermission,
    Action,
    ActionKind,
    AddKey,
    CreateAccount,
    DeleteAccount,
    DeleteKey,
    DeployContract,
    DeployGlobalContract,
    DeterministicAccountStateInit,
    DeterministicStateInit,
    FullAccessPermission,
    FunctionCall,
    FunctionCallPermission,
    GlobalContractDeployMode,
    GlobalContractIdentifier,
    Stake,
    Transfer,
    UseGlobalContract,
)
from .block_reference import BlockReference, Finality, TxExecutionStatus
from .delegate import DELEGATE_ACTION_PREFIX, Delegate, DelegateAction, SignedDelegateAction
from .hash import CryptoHash
from .transaction import SignedTransaction, Transaction
from .units import Gas, NearToken
from .views import (
    AccessKeyInfoView,
    AccessKeyListView,
    AccessKeyView,
    AccountView,
    BlockView,
    FinalExecutionOutcome,
    GasPrice,
    StatusResponse,
    ViewFunctionResult,
)

__all__ = [
    "AccessKey",
    "AccessKeyInfoView",
    "AccessKeyListView",
    "AccessKeyPermission",
    "AccessKeyView",
    "AccountId",
    "AccountView",
    "Action",
    "ActionKind",
    "AddKey",
    "BlockReference",
    "BlockView",
    "CreateAccount",
    "CryptoHash",
    "DELEGATE_ACTION_PREFIX",
    "Delegate",
    "DelegateAction",
    "DeleteAccount",
    "DeleteKey",
    "DeployContract",
    "DeployGlobalContract",
    "DeterministicAccountStateInit",
    "DeterministicStateInit",
    "FinalExecutionOutcome",
    "Finality",
    "FullAccessPermission",
    "FunctionCall",
    "FunctionCallPermission",
    "Gas",
    "GasPrice",
    "GlobalContractDeployMode",
    "GlobalContractIdentifier",
    "NearToken",
    "SignedDelegateAction",
    "SignedTransaction",
    "Stake",
    "StatusResponse",
    "Transaction",
    "Transfer",
    "TxExecutionStatus",
    "UseGlobalContract",
    "ViewFunctionResult",
]
