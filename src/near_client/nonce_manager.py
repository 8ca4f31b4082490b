"""
Per-key nonce cache.

Every (account, public key) pair has its own nonce line on the ledger. The
manager fetches the on-ledger value once, then hands out strictly
increasing nonces locally so concurrent transactions for the same key never
reuse a nonce and do not wait on each other's network round-trips.

The map lock is held only for lookups and inserts, never across the fetch.
A thread lock (rather than an asyncio one) keeps a manager shared between
event loops or threads correct.
"""

from __future__ import annotations
import logging
import threading
from typing import Awaitable, Callable, Dict

logger = logging.getLogger(__name__)

NonceFetcher = Callable[[], Awaitable[int]]


class NonceManager:
    """
    Issues nonces for transaction signing.

    Owned by a client and shared by every transaction builder it creates.
    """

    def __init__(self):
        self._next: Dict[str, int] = {}
        self._lock = threading.Lock()

    @staticmethod
    def _key(account_id: str, public_key: object) -> str:
        return f"{account_id}:{public_key}"

    def _take(self, key: str, floor: int = 0) -> int:
        # caller holds the lock
        nonce = max(self._next[key], floor)
        self._next[key] = nonce + 1
        return nonce

    async def get_next_nonce(self, account_id: str, public_key: object, fetch: NonceFetcher) -> int:
        """
        Next nonce for the key.

        Args:
            account_id: Signer account
            public_key: Signing key (anything with a stable ``str``)
            fetch: Coroutine factory returning the key's current on-ledger nonce;
                only awaited when the key is not cached

        Returns:
            A nonce no other call for this key has returned
        """
        key = self._key(account_id, public_key)
        with self._lock:
            if key in self._next:
                return self._take(key)

        logger.debug(f"Nonce cache miss for {key}, fetching from chain")
        next_nonce = await fetch() + 1

        with self._lock:
            if key in self._next:
                # another task populated the entry while we were fetching
                return self._take(key, floor=next_nonce)
            self._next[key] = next_nonce + 1
            return next_nonce

    def update_and_get_next(self, account_id: str, public_key: object, authoritative_nonce: int) -> int:
        """
        Reconcile with the nonce reported by a rejection and return a fresh one.

        Never returns a value at or below one already handed out for the key.

        Args:
            account_id: Signer account
            public_key: Signing key
            authoritative_nonce: Current access key nonce reported by the node

        Returns:
            Nonce to retry with
        """
        key = self._key(account_id, public_key)
        candidate = authoritative_nonce + 1
        with self._lock:
            cached = self._next.get(key)
            if cached is None or candidate > cached:
                logger.debug(f"Nonce for {key} advanced to {candidate} from chain")
                self._next[key] = candidate + 1
                return candidate
            return self._take(key)

    def invalidate(self, account_id: str, public_key: object) -> None:
        """Forget the cached nonce so the next call fetches from chain."""
        key = self._key(account_id, public_key)
        with self._lock:
            if self._next.pop(key, None) is not None:
                logger.debug(f"Invalidated cached nonce for {key}")

    def clear(self) -> None:
        with self._lock:
            self._next.clear()

    def __contains__(self, item) -> bool:
        account_id, public_key = item
        with self._lock:
            return self._key(account_id, public_key) in self._next
