"""
Signers that load one key at construction time: from a credentials file
or from environment variables.

Credential files follow the NEAR CLI layout
``~/.near-credentials/<network>/<account>.json`` with a ``private_key``
(or legacy ``secret_key``) entry.
"""

from __future__ import annotations
import json
import logging
import os
from pathlib import Path
from typing import Optional, Union

from ..crypto.keys import SecretKey
from ..runtime.errors import InvalidKeyFormatError, KeyNotFoundError, ParseKeyError
from ..types.account import AccountId
from .in_memory import InMemorySigner

logger = logging.getLogger(__name__)

DEFAULT_CREDENTIALS_DIR = Path("~/.near-credentials")


def credentials_path(network: str, account_id: str,
                     credentials_dir: Optional[Union[str, Path]] = None) -> Path:
    base = Path(credentials_dir) if credentials_dir else DEFAULT_CREDENTIALS_DIR
    return base.expanduser() / network / f"{account_id}.json"


def parse_credential_record(content: str, source: str) -> SecretKey:
    """
    Extract the secret key from a JSON credential record.

    Args:
        content: JSON text
        source: Where the record came from, for error messages

    Raises:
        InvalidKeyFormatError: If the JSON, the key field, or the key is malformed
    """
    try:
        record = json.loads(content)
    except json.JSONDecodeError as e:
        raise InvalidKeyFormatError(f"Invalid JSON in credential {source}", cause=e)
    if not isinstance(record, dict):
        raise InvalidKeyFormatError(f"Credential {source} is not a JSON object")
    private_key = record.get("private_key") or record.get("secret_key")
    if not isinstance(private_key, str):
        raise InvalidKeyFormatError(f"Missing 'private_key' field in credential {source}")
    try:
        secret_key = SecretKey.from_string(private_key)
    except ParseKeyError as e:
        raise InvalidKeyFormatError(f"Invalid key in credential {source}", cause=e)
    declared = record.get("public_key")
    if declared is not None and str(secret_key.public_key()) != declared:
        raise InvalidKeyFormatError(
            f"Public key mismatch in credential {source}",
            details={"declared": declared, "derived": str(secret_key.public_key())},
        )
    return secret_key


class FileSigner(InMemorySigner):
    """Signer backed by a NEAR CLI credentials file."""

    def __init__(self, network: Optional[str], account_id: str,
                 credentials_dir: Optional[Union[str, Path]] = None,
                 path: Optional[Union[str, Path]] = None):
        """
        Load ``<credentials_dir>/<network>/<account_id>.json``, or ``path`` if given.

        Raises:
            KeyNotFoundError: If the file does not exist
            InvalidKeyFormatError: If the file cannot be parsed
        """
        account_id = AccountId(account_id)
        if path is None:
            path = credentials_path(network, account_id, credentials_dir)
        self.path = Path(path).expanduser()
        super().__init__(account_id, self._read(self.path))
        logger.debug(f"Loaded credentials for {account_id} from {self.path}")

    @classmethod
    def from_file(cls, path: Union[str, Path], account_id: str) -> FileSigner:
        """Load a credentials file at an explicit path."""
        return cls(None, account_id, path=path)

    @staticmethod
    def _read(path: Path) -> SecretKey:
        try:
            content = path.read_text(encoding="utf-8")
        except FileNotFoundError as e:
            raise KeyNotFoundError(f"Credentials file not found: {path}", cause=e)
        except OSError as e:
            raise InvalidKeyFormatError(f"Failed to read credentials file {path}", cause=e)
        return parse_credential_record(content, str(path))

    def __repr__(self) -> str:
        return f"FileSigner(account_id={self.account_id!r}, path={str(self.path)!r})"


class EnvSigner(InMemorySigner):
    """Signer configured from environment variables."""

    def __init__(self, account_var: str = "NEAR_ACCOUNT_ID", key_var: str = "NEAR_PRIVATE_KEY"):
        """
        Read account id and secret key from the environment.

        Raises:
            KeyNotFoundError: If either variable is unset
            InvalidKeyFormatError: If the key cannot be parsed
        """
        account_id = os.environ.get(account_var)
        if not account_id:
            raise KeyNotFoundError(f"Environment variable {account_var} not set")
        private_key = os.environ.get(key_var)
        if not private_key:
            raise KeyNotFoundError(f"Environment variable {key_var} not set")
        try:
            secret_key = SecretKey.from_string(private_key)
        except ParseKeyError as e:
            raise InvalidKeyFormatError(f"Invalid key in environment variable {key_var}", cause=e)
        super().__init__(account_id, secret_key)

    def __repr__(self) -> str:
        return f"EnvSigner(account_id={self.account_id!r}, public_key={self.public_key})"
