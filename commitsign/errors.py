"""Error taxonomy for key resolution, decryption and signing."""

from __future__ import annotations

from pathlib import Path


class SigningError(Exception):
    """Base class for every condition raised by commitsign."""


class KeyResolutionError(SigningError):
    """Secret or public key could not be resolved.

    Carries the requested key identifier and the storage path that was
    consulted so callers can render a single diagnostic.
    """

    def __init__(
        self,
        message: str,
        *,
        key_id: str | None = None,
        path: Path | str | None = None,
    ) -> None:
        self.key_id = key_id
        self.path = Path(path) if path is not None else None
        details = []
        if key_id is not None:
            details.append(f"key {key_id or '<unset>'}")
        if self.path is not None:
            details.append(f"in {self.path}")
        if details:
            message = f"{message} ({', '.join(details)})"
        super().__init__(message)


class KeyStoreNotFound(KeyResolutionError):
    """A key store path does not exist."""


class PublicKeyNotFound(KeyResolutionError):
    """No public key in the keybox matches the identifier."""


class SecretKeyNotFound(KeyResolutionError):
    """No secret key matches the identifier or the located public key."""


class NoKeyStoreAvailable(KeyResolutionError):
    """None of the supported key store layouts exists."""


class KeyStoreCorrupt(SigningError):
    """A key store container is structurally malformed."""

    def __init__(self, message: str, *, path: Path | str | None = None) -> None:
        self.path = Path(path) if path is not None else None
        if self.path is not None:
            message = f"{message} ({self.path})"
        super().__init__(message)


class DecryptionFailed(SigningError):
    """Wrong passphrase or corrupt secret key material."""


class PassphraseCancelled(SigningError):
    """The credential collaborator declined to provide a passphrase."""


class KeyDecodeFailed(SigningError):
    """Fatal cryptographic or structural error; never retried."""


__all__ = [
    "SigningError",
    "KeyResolutionError",
    "KeyStoreNotFound",
    "KeyStoreCorrupt",
    "PublicKeyNotFound",
    "SecretKeyNotFound",
    "NoKeyStoreAvailable",
    "DecryptionFailed",
    "PassphraseCancelled",
    "KeyDecodeFailed",
]
