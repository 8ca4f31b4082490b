"""
NEAR Python client

Key and signature types, canonical (Borsh) transaction encoding, pluggable
signers, a concurrency-safe nonce manager, an async JSON-RPC client with
retries, transaction and delegate-action builders, and NEP-413 off-chain
message signing.
"""

# Errors
from .runtime.errors import *

# Encoding and keys
from .codec import BorshReader, BorshWriter, keccak256, sha256
from .crypto import *

# Ledger types
from .types import *

# Signing
from .signers import *
from .nonce_manager import NonceManager
from . import nep413
from .nep413 import AuthPayload, SignedMessage, SignMessageParams, VerifyOptions

# Transport and transactions
from .rpc import *
from .tx import *
from .client import ClientConfig, Near

__version__ = "0.1.0"
