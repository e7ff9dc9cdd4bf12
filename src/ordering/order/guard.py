"""Duplicate-submission protection for checkout.

Two mechanisms, both keyed on the user:

- A per-user lock held while an order is priced and written, so concurrent
  submissions from one user run one after the other instead of interleaving.
- Client-supplied idempotency keys. A repeated submission carrying a key that
  already produced an order gets that order back instead of a new one. Each
  key is bound to a fingerprint of the submission it came with; reusing it for
  a different submission is rejected. Keys are remembered for a limited time.

Configuration comes from the environment:
    CHECKOUT_LOCK_TIMEOUT  seconds to wait for the user's lock (default 5)
    IDEMPOTENCY_KEY_TTL    seconds an idempotency key is remembered (default 600)
"""

import os
import threading
import time
from contextlib import contextmanager

from ordering.errors import CheckoutInProgress, InvalidRequest


class _UserLock:
    """A user's checkout lock and the number of callers holding or awaiting it."""

    def __init__(self) -> None:
        self.lock = threading.Lock()
        self.users = 0


class CheckoutGuard:
    def __init__(self, lock_timeout: float = 5.0, key_ttl: float = 600.0, clock=time.monotonic) -> None:
        self.lock_timeout = lock_timeout
        self.key_ttl = key_ttl
        self._clock = clock
        self._registry_lock = threading.Lock()
        self._user_locks: dict[str, _UserLock] = {}
        self._keys: dict[tuple[str, str], tuple[str, str | None, float]] = {}

    @classmethod
    def from_env(cls) -> "CheckoutGuard":
        return cls(
            lock_timeout=float(os.environ.get("CHECKOUT_LOCK_TIMEOUT", "5")),
            key_ttl=float(os.environ.get("IDEMPOTENCY_KEY_TTL", "600")),
        )

    def _enter(self, user_id: str) -> _UserLock:
        with self._registry_lock:
            entry = self._user_locks.get(user_id)
            if entry is None:
                entry = self._user_locks[user_id] = _UserLock()
            entry.users += 1
            return entry

    def _leave(self, user_id: str, entry: _UserLock) -> None:
        with self._registry_lock:
            entry.users -= 1
            # Nobody holds or waits for it any more
            if entry.users == 0 and self._user_locks.get(user_id) is entry:
                del self._user_locks[user_id]

    @contextmanager
    def hold(self, user_id):
        """Hold the user's checkout lock for the duration of the block."""
        user_id = str(user_id)
        entry = self._enter(user_id)
        try:
            if not entry.lock.acquire(timeout=self.lock_timeout):
                raise CheckoutInProgress({"checkout": ["Another checkout for this user is still in progress"]})
            try:
                yield
            finally:
                entry.lock.release()
        finally:
            self._leave(user_id, entry)

    def recall(self, user_id, idempotency_key, fingerprint=None) -> str | None:
        """Return the order id previously recorded for this key, if still fresh.

        Raises InvalidRequest when the key was recorded for a submission with
        a different fingerprint.
        """
        if not idempotency_key:
            return None

        entry_key = (str(user_id), idempotency_key)
        with self._registry_lock:
            entry = self._keys.get(entry_key)
            if entry is None:
                return None
            order_id, recorded_fingerprint, recorded_at = entry
            if self._clock() - recorded_at > self.key_ttl:
                del self._keys[entry_key]
                return None

        if recorded_fingerprint != fingerprint:
            raise InvalidRequest(
                {"idempotency_key": ["Idempotency key was already used for a different checkout"]}
            )
        return order_id

    def remember(self, user_id, idempotency_key, order_id, fingerprint=None) -> None:
        if not idempotency_key:
            return

        now = self._clock()
        with self._registry_lock:
            self._purge_expired(now)
            self._keys[(str(user_id), idempotency_key)] = (str(order_id), fingerprint, now)

    def _purge_expired(self, now: float) -> None:
        expired = [key for key, (_, _, recorded_at) in self._keys.items() if now - recorded_at > self.key_ttl]
        for key in expired:
            del self._keys[key]

    def reset(self) -> None:
        with self._registry_lock:
            self._user_locks.clear()
            self._keys.clear()


checkout_guard = CheckoutGuard.from_env()
