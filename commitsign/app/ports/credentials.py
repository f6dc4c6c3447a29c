"""Credential port interface for interactive passphrase entry."""

from typing import Protocol


class CredentialPort(Protocol):
    """Port interface for the embedding application's credential prompt.

    This is the only interactive boundary of the signing subsystem; any
    timeout belongs to the implementation.
    """

    def get_password(self, resource: str, message: str) -> str | bytes | bytearray | None:
        """Ask for the secret protecting ``resource``.

        Args:
            resource: Locator of the key being unlocked
            message: Prompt text explaining why the secret is needed

        Returns:
            The secret, or None if the user declined
        """
        ...
