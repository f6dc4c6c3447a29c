"""Signer and verifier port interfaces for commit signatures."""

from typing import Protocol


class SignerPort(Protocol):
    """Port interface for producing detached commit signatures.

    Side effects: may prompt for a passphrase through the credential port.
    """

    def sign(self, payload: bytes, key_id: str | None = None) -> bytes:
        """Sign payload.

        Args:
            payload: Raw commit content to sign
            key_id: Hex key identifier, or None / "default" for the configured key

        Returns:
            ASCII-armored signature with continuation lines indented by one space
        """
        ...

    def can_locate_signing_key(self, key_id: str | None = None) -> bool:
        """Return True if a secret key for ``key_id`` can be found without unlocking it."""
        ...


class VerifierPort(Protocol):
    """Port interface for checking detached commit signatures.

    Side effects: None (pure computation over key store contents).
    """

    def verify(self, payload: bytes, signature: bytes | str, key_id: str) -> bool:
        """Verify signature.

        Args:
            payload: Original data
            signature: Armored signature, plain or in embedded header form
            key_id: Hex identifier of the expected signer

        Returns:
            True if signature is valid
        """
        ...
