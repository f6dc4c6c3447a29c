"""Detached commit signatures: creation, verification and the signing facade."""

from __future__ import annotations

import logging
from pathlib import Path

import pgpy
from pgpy.errors import PGPError

from commitsign.app.key_locator import KeyLocator, as_identifier
from commitsign.app.passphrase import PassphraseRetryCoordinator
from commitsign.app.ports import (
    KeyStorePort,
    PublicKeyRecord,
    SecretKeyRecord,
    SignerPort,
    VerifierPort,
)
from commitsign.app.secret_key_resolver import SecretKeyResolver
from commitsign.app.unlock import open_signing_key
from commitsign.config import DEFAULT_KEY_ALIAS, Settings, get_settings
from commitsign.errors import KeyDecodeFailed, PassphraseCancelled, PublicKeyNotFound, SigningError
from commitsign.openpgp.context import CryptoContext
from commitsign.utils.secure import wipe

logger = logging.getLogger(__name__)


def embed_signature(armored: str) -> str:
    """Indent every line after a line break by one space (commit header form)."""
    return armored.replace("\r\n", "\n").replace("\n", "\n ")


def extract_signature(embedded: bytes | str) -> str:
    """Undo :func:`embed_signature`; plain armor passes through unchanged."""
    if isinstance(embedded, (bytes, bytearray)):
        embedded = bytes(embedded).decode("ascii")
    return embedded.replace("\r\n", "\n").replace("\n ", "\n")


class SignatureEngine:
    """Produce armored detached signatures with SHA-256."""

    def __init__(self, context: CryptoContext):
        self.context = context

    def sign(
        self,
        payload: bytes,
        record: SecretKeyRecord,
        passphrase: bytes | bytearray | None = None,
    ) -> bytes:
        """Sign payload with the key in ``record``.

        Args:
            payload: Bytes to sign (not modified)
            record: Resolved secret key
            passphrase: Passphrase for a key that is still locked

        Returns:
            Armored signature in embedded form, ASCII encoded

        Raises:
            DecryptionFailed: If the passphrase does not unlock the key.
            KeyDecodeFailed: If the key cannot produce a signature.
        """
        with open_signing_key(record, passphrase, self.context) as key:
            try:
                signature = key.sign(bytes(payload), hash=self.context.signature_hash)
            except (PGPError, NotImplementedError, ValueError) as exc:
                raise KeyDecodeFailed(f"key {record.key_id} cannot sign: {exc}") from exc
        logger.debug("Signed %d bytes with key %s", len(payload), record.key_id)
        return embed_signature(str(signature)).encode("ascii")


class SignatureVerifier:
    """Check detached signatures; every failure is reported as False."""

    def verify(self, signature: bytes | str, public_key: PublicKeyRecord, payload: bytes) -> bool:
        try:
            certificate, _ = pgpy.PGPKey.from_blob(public_key.keyblock)
            detached = pgpy.PGPSignature.from_blob(extract_signature(signature))
            verified = bool(certificate.verify(bytes(payload), detached))
        except Exception as exc:
            logger.debug("Signature did not verify against %s: %s", public_key.key_id, exc)
            return False
        if not verified:
            logger.debug("Signature does not match payload for %s", public_key.key_id)
        return verified


def resource_locator(record: SecretKeyRecord) -> str:
    """Name the key a passphrase unlocks, for retry accounting and prompts."""
    source = record.public_key.source or record.source
    return f"{source}#{record.key_id}"


class _AttemptPassphrase:
    """Passphrase of one signing attempt, prompted for on first use."""

    def __init__(self, coordinator: PassphraseRetryCoordinator):
        self.coordinator = coordinator
        self.resource: str | None = None
        self.buffer: bytearray | None = None

    def __call__(self, record: SecretKeyRecord) -> bytearray:
        if self.buffer is None:
            self.resource = resource_locator(record)
            self.buffer = self.coordinator.request_passphrase(self.resource)
        return self.buffer

    def wipe(self) -> None:
        wipe(self.buffer)


class CommitSigner(SignerPort, VerifierPort):
    """Sign and verify commit payloads with keys from a GnuPG home."""

    def __init__(
        self,
        keystore: KeyStorePort,
        coordinator: PassphraseRetryCoordinator,
        *,
        context: CryptoContext,
        settings: Settings | None = None,
    ):
        self.keystore = keystore
        self.coordinator = coordinator
        self.context = context
        self.settings = settings or get_settings()
        self.locator = KeyLocator(keystore)
        self.resolver = SecretKeyResolver(
            keystore, self.locator, context=context, settings=self.settings
        )
        self.engine = SignatureEngine(context)
        self.verifier = SignatureVerifier()

    def _signing_key_id(self, key_id: str | None) -> str:
        if key_id is None or key_id == DEFAULT_KEY_ALIAS:
            key_id = self.settings.signing_key
        if not key_id:
            raise PublicKeyNotFound("no signing key configured", key_id="")
        return key_id

    def sign(
        self,
        payload: bytes,
        key_id: str | None = None,
        *,
        secret_key_path: Path | None = None,
    ) -> bytes:
        identifier = as_identifier(self._signing_key_id(key_id))
        while True:
            attempt = _AttemptPassphrase(self.coordinator)
            try:
                record = self.resolver.resolve(identifier, attempt, secret_key_path)
                passphrase = attempt.buffer
                if record.format == "keyring" and record.is_protected:
                    passphrase = attempt(record)
                signature = self.engine.sign(payload, record, passphrase)
            except PassphraseCancelled:
                raise
            except Exception as exc:
                if attempt.resource is None:
                    raise
                if self.coordinator.report_outcome(attempt.resource, attempt.buffer, exc):
                    logger.info("Retrying passphrase for %s", attempt.resource)
                    continue
                raise
            else:
                if attempt.resource is not None:
                    self.coordinator.report_outcome(attempt.resource, attempt.buffer, None)
                return signature
            finally:
                attempt.wipe()

    def can_locate_signing_key(
        self, key_id: str | None = None, *, secret_key_path: Path | None = None
    ) -> bool:
        try:
            identifier = self._signing_key_id(key_id)
            self.resolver.find_secret_key(identifier, secret_key_path)
        except (SigningError, ValueError) as exc:
            logger.debug("Signing key %s not found: %s", key_id, exc)
            return False
        return True

    def find_public_key(self, key_id: str) -> PublicKeyRecord | None:
        """Locate ``key_id`` in the keybox, or the legacy keyring when no keybox exists."""
        identifier = as_identifier(key_id)
        keybox = self.settings.get_keybox_path()
        if keybox.is_file():
            return self.locator.find_public_key(identifier, keybox)
        legacy = self.settings.get_secret_key_override() or self.settings.get_legacy_secret_keyring_path()
        if not legacy.is_file():
            return None
        records = self.keystore.open_legacy_secret_keyring(legacy)
        for record in records:
            if identifier.matches(record.public_key.fingerprint):
                return record.public_key
        return None

    def verify(self, payload: bytes, signature: bytes | str, key_id: str) -> bool:
        public_key = self.find_public_key(key_id)
        if public_key is None:
            logger.info("No public key for %s; signature not verified", key_id)
            return False
        return self.verifier.verify(signature, public_key, payload)
