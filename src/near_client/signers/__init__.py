"""
Signers: one capability interface, several key sources.
"""

from .file import EnvSigner, FileSigner
from .in_memory import InMemorySigner
from .keyring_signer import KeyringSigner
from .rotating import RotatingSigner
from .signer import ClaimedKey, Signer

__all__ = [
    "ClaimedKey",
    "EnvSigner",
    "FileSigner",
    "InMemorySigner",
    "KeyringSigner",
    "RotatingSigner",
    "Signer",
]
