"""Bounded passphrase retry protocol shared by concurrent signing requests.

Each resource (the string naming the key a passphrase unlocks) gets its own
:class:`RetryState` while a prompt sequence is in flight. The state is
created on the first prompt and removed once the resource either succeeds
or runs out of attempts.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field

from cryptography.exceptions import InvalidKey, InvalidSignature, UnsupportedAlgorithm

from commitsign.app.ports import CredentialPort
from commitsign.errors import (
    DecryptionFailed,
    KeyDecodeFailed,
    KeyStoreCorrupt,
    PassphraseCancelled,
)
from commitsign.utils.secure import to_secret_buffer, wipe

logger = logging.getLogger(__name__)

FIRST_PROMPT = "Key '{resource}' is encrypted. Enter the passphrase to decrypt it."
RETRY_PROMPT = "Encrypted key '{resource}' could not be decrypted. Enter the passphrase again."

# Failures no passphrase can fix.
FATAL_ERRORS: tuple[type[BaseException], ...] = (
    KeyDecodeFailed,
    KeyStoreCorrupt,
    InvalidKey,
    InvalidSignature,
    UnsupportedAlgorithm,
)


@dataclass
class RetryState:
    """Prompt bookkeeping for one resource."""

    attempt_count: int = 0
    """Prompts issued so far for the resource"""

    password: bytearray | None = field(default=None, repr=False)
    """Last passphrase obtained, wiped as soon as its outcome is known"""

    lock: threading.Lock = field(default_factory=threading.Lock, repr=False)
    """Serializes prompting and outcome reporting for the resource"""

    def set_password(self, password: bytearray | None) -> None:
        wipe(self.password)
        self.password = password


class PassphraseRetryCoordinator:
    """Obtain passphrases from a credential collaborator with a retry budget.

    Example:
        >>> coordinator = PassphraseRetryCoordinator(TerminalCredentialAdapter(), attempts=3)
        >>> while True:
        >>>     password = coordinator.request_passphrase(resource)
        >>>     try:
        >>>         unlock(password)
        >>>     except DecryptionFailed as exc:
        >>>         if coordinator.report_outcome(resource, password, exc):
        >>>             continue
        >>>         raise
        >>>     coordinator.report_outcome(resource, password, None)
        >>>     break
    """

    def __init__(self, credentials: CredentialPort, *, attempts: int = 1):
        self.credentials = credentials
        self.attempts = attempts
        self._states: dict[str, RetryState] = {}
        self._states_lock = threading.Lock()

    @property
    def attempts(self) -> int:
        """Number of prompts allowed per resource before giving up."""
        return self._attempts

    @attempts.setter
    def attempts(self, value: int) -> None:
        if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
            raise ValueError(f"passphrase attempt budget must be a positive integer, got {value!r}")
        self._attempts = value

    def _acquire_state(self, resource: str) -> RetryState:
        # Returns with state.lock held. A state evicted while we waited for
        # its lock is stale, so look the resource up again.
        while True:
            with self._states_lock:
                state = self._states.get(resource)
                if state is None:
                    state = self._states[resource] = RetryState()
            state.lock.acquire()
            with self._states_lock:
                if self._states.get(resource) is state:
                    return state
            state.lock.release()

    def _evict(self, resource: str, state: RetryState) -> None:
        state.set_password(None)
        with self._states_lock:
            if self._states.get(resource) is state:
                del self._states[resource]

    def request_passphrase(self, resource: str) -> bytearray:
        """Prompt for the passphrase of ``resource``.

        Args:
            resource: Locator of the key being unlocked

        Returns:
            A private copy of the passphrase; the caller wipes it after use

        Raises:
            PassphraseCancelled: If the credential collaborator declined.
            DecryptionFailed: If every attempt for ``resource`` was already used.
        """
        state = self._acquire_state(resource)
        try:
            state.set_password(None)
            if state.attempt_count >= self.attempts:
                self._evict(resource, state)
                logger.warning("Passphrase attempts for %s are used up", resource)
                raise DecryptionFailed(f"no passphrase attempts left for {resource}")
            state.attempt_count += 1
            template = FIRST_PROMPT if state.attempt_count == 1 else RETRY_PROMPT
            logger.debug("Requesting passphrase for %s (attempt %d)", resource, state.attempt_count)
            reply = self.credentials.get_password(resource, template.format(resource=resource))
            password = to_secret_buffer(reply)
            if isinstance(reply, bytearray):
                wipe(reply)
            if password is None:
                self._evict(resource, state)
                logger.warning("Passphrase entry for %s was cancelled", resource)
                raise PassphraseCancelled(f"no passphrase provided for {resource}")
            state.set_password(password)
            return bytearray(password)
        finally:
            state.lock.release()

    def report_outcome(
        self,
        resource: str,
        attempted: bytes | bytearray | None,
        error: BaseException | None,
    ) -> bool:
        """Record how using a passphrase for ``resource`` went.

        The stored passphrase is wiped whatever the outcome, and the state is
        dropped whenever the answer is "no retry".

        Args:
            resource: Locator passed to :meth:`request_passphrase`
            attempted: The passphrase that was tried, or None if none was
            error: The failure the attempt produced, None on success

        Returns:
            True if the caller should prompt again

        Raises:
            KeyDecodeFailed: If ``error`` is a cryptographic or structural failure.
        """
        with self._states_lock:
            state = self._states.get(resource)
        if state is None:
            _raise_if_fatal(error)
            return False

        with state.lock:
            if self._states.get(resource) is not state:
                _raise_if_fatal(error)
                return False
            state.set_password(None)
            if error is None:
                self._evict(resource, state)
                return False
            if isinstance(error, FATAL_ERRORS):
                self._evict(resource, state)
                _raise_if_fatal(error)

            retry = attempted is not None and state.attempt_count < self.attempts
            if not retry:
                self._evict(resource, state)
                logger.warning(
                    "Giving up on %s after %d passphrase attempt(s)", resource, state.attempt_count
                )
            return retry

    def pending_resources(self) -> list[str]:
        """Resources with a prompt sequence in flight."""
        with self._states_lock:
            return sorted(self._states)

    def holds_password(self, resource: str) -> bool:
        """Whether a passphrase for ``resource`` is currently retained."""
        with self._states_lock:
            state = self._states.get(resource)
        return state is not None and state.password is not None


def _raise_if_fatal(error: BaseException | None) -> None:
    if error is None or not isinstance(error, FATAL_ERRORS):
        return
    if isinstance(error, KeyDecodeFailed):
        raise error
    raise KeyDecodeFailed(f"cannot use key: {error}") from error
