"""Credential adapters: terminal prompt and preconfigured passphrase."""

from __future__ import annotations

import click
import typer

from commitsign.app.ports import CredentialPort
from commitsign.utils.secure import to_secret_buffer, wipe


class TerminalCredentialAdapter(CredentialPort):
    """Prompt on the controlling terminal with echo disabled."""

    def __init__(self, label: str = "Passphrase") -> None:
        self.label = label

    def get_password(self, resource: str, message: str) -> str | None:
        typer.echo(message, err=True)
        try:
            return typer.prompt(self.label, hide_input=True, err=True)
        except click.exceptions.Abort:
            return None


class StaticCredentialAdapter(CredentialPort):
    """Serve a passphrase configured up front (non-interactive signing).

    Every request gets its own copy so callers may wipe what they receive.
    Returns None, which counts as cancellation, when no passphrase is set.
    """

    def __init__(self, passphrase: str | bytes | bytearray | None) -> None:
        self._passphrase = to_secret_buffer(passphrase)

    def get_password(self, resource: str, message: str) -> bytearray | None:
        if self._passphrase is None:
            return None
        return bytearray(self._passphrase)

    def close(self) -> None:
        wipe(self._passphrase)
        self._passphrase = None
