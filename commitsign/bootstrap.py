"""Application bootstrap wiring ports, adapters, and services."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from commitsign.app import CommitSigner, KeyLocator, PassphraseRetryCoordinator
from commitsign.app.adapters import (
    GnuPGKeyStoreAdapter,
    StaticCredentialAdapter,
    TerminalCredentialAdapter,
)
from commitsign.app.ports import CredentialPort, KeyStorePort
from commitsign.config import Settings, get_settings
from commitsign.openpgp.context import CryptoContext, initialize_crypto_context

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class ApplicationContainer:
    """Aggregates wired services and adapters for the CLI layer."""

    settings: Settings
    context: CryptoContext
    keystore: KeyStorePort
    credentials: CredentialPort
    coordinator: PassphraseRetryCoordinator
    locator: KeyLocator
    signer: CommitSigner
    owns_credentials: bool = True

    def close(self) -> None:
        """Wipe a configured passphrase; caller-supplied credentials are left alone."""
        close = getattr(self.credentials, "close", None)
        if self.owns_credentials and close is not None:
            close()


def _create_credentials(settings: Settings) -> CredentialPort:
    passphrase = settings.get_passphrase()
    if passphrase is not None:
        logger.debug("Using the configured passphrase instead of prompting")
        return StaticCredentialAdapter(passphrase)
    return TerminalCredentialAdapter()


def bootstrap_application(
    settings: Settings | None = None,
    credentials: CredentialPort | None = None,
) -> ApplicationContainer:
    """Instantiate adapters and services for CLI consumption."""

    active_settings = settings or get_settings()
    context = initialize_crypto_context()

    keystore = GnuPGKeyStoreAdapter()
    credential_port = credentials or _create_credentials(active_settings)
    coordinator = PassphraseRetryCoordinator(
        credential_port, attempts=active_settings.passphrase_attempts
    )
    signer = CommitSigner(keystore, coordinator, context=context, settings=active_settings)

    return ApplicationContainer(
        settings=active_settings,
        context=context,
        keystore=keystore,
        credentials=credential_port,
        coordinator=coordinator,
        locator=signer.locator,
        signer=signer,
        owns_credentials=credentials is None,
    )
