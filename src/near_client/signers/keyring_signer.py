"""
Signer backed by the OS credential store.

Entries use the NEAR CLI layout: service ``near-<network>-<account>``,
username ``<account>:<public_key>``, and a JSON password containing
``private_key``.
"""

from __future__ import annotations
import logging
from typing import Union

import keyring
from keyring.errors import KeyringError

from ..crypto.keys import PublicKey
from ..runtime.errors import InvalidKeyFormatError, KeyNotFoundError, PlatformError
from ..types.account import AccountId
from .file import parse_credential_record
from .in_memory import InMemorySigner

logger = logging.getLogger(__name__)


def keyring_service_name(network: str, account_id: str) -> str:
    return f"near-{network}-{account_id}"


def keyring_username(account_id: str, public_key: Union[str, PublicKey]) -> str:
    return f"{account_id}:{public_key}"


class KeyringSigner(InMemorySigner):
    """Loads one key from the system keyring at construction time."""

    def __init__(self, network: str, account_id: str, public_key: Union[str, PublicKey]):
        """
        Look up the key for ``account_id``/``public_key`` on ``network``.

        Raises:
            KeyNotFoundError: If no entry exists
            PlatformError: If the keyring backend is unavailable or fails
            InvalidKeyFormatError: If the entry is malformed or holds another key
        """
        account_id = AccountId(account_id)
        public_key = PublicKey.coerce(public_key)
        service = keyring_service_name(network, account_id)
        username = keyring_username(account_id, public_key)

        try:
            password = keyring.get_password(service, username)
        except KeyringError as e:
            raise PlatformError(
                f"Failed to read from keyring: {e}. On Linux, ensure a Secret Service "
                f"daemon (gnome-keyring, kwallet) is running.",
                cause=e,
            )
        if password is None:
            raise KeyNotFoundError(
                f"No keyring entry for {account_id}",
                details={"service": service, "username": username},
            )

        secret_key = parse_credential_record(password, f"keyring entry {service}")
        super().__init__(account_id, secret_key)
        if self.public_key != public_key:
            raise InvalidKeyFormatError(
                f"Public key mismatch: stored key has {self.public_key}, but requested {public_key}"
            )
        logger.debug(f"Loaded keyring credentials for {account_id} ({public_key})")

    def __repr__(self) -> str:
        return f"KeyringSigner(account_id={self.account_id!r}, public_key={self.public_key})"
