"""Secret key resolution across the GnuPG key store generations.

GnuPG 2.1 moved secret keys out of the combined ``secring.gpg`` into one
file per key under ``private-keys-v1.d`` and public keys into a keybox.
Installations of either generation are served without configuration:

1. an explicitly configured secret keyring,
2. else the keybox plus secret key directory,
3. else the legacy secret keyring,
4. else nothing to sign with.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import Path
from typing import Union

from commitsign.app.key_locator import KeyLocator, as_identifier
from commitsign.app.ports import KeyIdentifier, KeyStorePort, PublicKeyRecord, SecretKeyRecord
from commitsign.app.unlock import unlock_agent_key
from commitsign.config import Settings, get_settings
from commitsign.errors import (
    DecryptionFailed,
    NoKeyStoreAvailable,
    PublicKeyNotFound,
    SecretKeyNotFound,
)
from commitsign.openpgp.context import CryptoContext
from commitsign.openpgp.protected_key import load_agent_key
from commitsign.openpgp.sexpr import SExpressionError
from commitsign.utils.secure import to_secret_buffer, wipe

logger = logging.getLogger(__name__)

PassphraseProvider = Callable[[SecretKeyRecord], Union[bytes, bytearray, None]]
Passphrase = Union[str, bytes, bytearray, None, PassphraseProvider]


class _PassphraseSource:
    """Fetch the passphrase at most once per resolution, and only if a key needs it."""

    def __init__(self, passphrase: Passphrase):
        self._provider = passphrase if callable(passphrase) else None
        self._value = None if callable(passphrase) else to_secret_buffer(passphrase)
        self._owned = self._provider is None
        self._fetched = self._provider is None

    def get(self, record: SecretKeyRecord) -> bytes | bytearray | None:
        if not self._fetched:
            self._fetched = True
            self._value = self._provider(record)
        return self._value

    def close(self) -> None:
        # Provider buffers belong to the provider.
        if self._owned:
            wipe(self._value)


class SecretKeyResolver:
    """Locate the secret key for an identifier and unlock it where needed."""

    def __init__(
        self,
        keystore: KeyStorePort,
        locator: KeyLocator,
        *,
        context: CryptoContext,
        settings: Settings | None = None,
    ):
        self.keystore = keystore
        self.locator = locator
        self.context = context
        self.settings = settings or get_settings()

    def resolve(
        self,
        identifier: KeyIdentifier | str,
        passphrase: Passphrase = None,
        explicit_path: Path | None = None,
    ) -> SecretKeyRecord:
        """Return the secret key matching ``identifier``.

        Keys from the secret key directory are decrypted while they are
        matched; the unlocked key travels with the record so it is not
        decrypted again. Keyring keys are decrypted by the signing engine.

        Args:
            identifier: Hex key identifier (16 to 40 digits)
            passphrase: Passphrase, or a callable receiving the candidate
                record and returning one (called at most once)
            explicit_path: Secret keyring to use instead of the GnuPG home

        Raises:
            PublicKeyNotFound: The keybox has no key for ``identifier``.
            SecretKeyNotFound: No secret key matches.
            DecryptionFailed: A matching key rejected the passphrase.
            NoKeyStoreAvailable: No key store exists under the GnuPG home.
        """
        source = _PassphraseSource(passphrase)
        try:
            return self._resolve(as_identifier(identifier), explicit_path, source)
        finally:
            source.close()

    def find_secret_key(
        self, identifier: KeyIdentifier | str, explicit_path: Path | None = None
    ) -> SecretKeyRecord:
        """Like :meth:`resolve`, but without decrypting anything."""
        return self._resolve(as_identifier(identifier), explicit_path, None)

    def _resolve(
        self,
        wanted: KeyIdentifier,
        explicit_path: Path | None,
        source: _PassphraseSource | None,
    ) -> SecretKeyRecord:
        override = explicit_path or self.settings.get_secret_key_override()
        if override is not None:
            logger.debug("Using configured secret keyring %s", override)
            return self._search_keyring(wanted, Path(override).expanduser())

        keybox = self.settings.get_keybox_path()
        if keybox.is_file():
            public_key = self.locator.find_public_key(wanted, keybox)
            if public_key is None:
                raise PublicKeyNotFound("no public key matches", key_id=str(wanted), path=keybox)
            return self._search_directory(wanted, public_key, source)

        legacy = self.settings.get_legacy_secret_keyring_path()
        if legacy.is_file():
            return self._search_keyring(wanted, legacy)

        raise NoKeyStoreAvailable(
            "no keybox or secret keyring found",
            key_id=str(wanted),
            path=self.settings.get_gnupg_home(),
        )

    def _search_keyring(self, wanted: KeyIdentifier, path: Path) -> SecretKeyRecord:
        records = self.keystore.open_legacy_secret_keyring(path)
        try:
            for record in records:
                if wanted.matches(record.public_key.fingerprint):
                    logger.info("Resolved secret key %s in %s", record.key_id, path)
                    return record
        finally:
            close = getattr(records, "close", None)
            if close is not None:
                close()
        raise SecretKeyNotFound("no secret key matches", key_id=str(wanted), path=path)

    def _search_directory(
        self,
        wanted: KeyIdentifier,
        public_key: PublicKeyRecord,
        source: _PassphraseSource | None,
    ) -> SecretKeyRecord:
        directory = self.settings.get_secret_key_dir()
        material = public_key.find_material()
        first_error: DecryptionFailed | None = None

        for key_file in self.keystore.open_secret_directory(directory):
            try:
                agent_key = load_agent_key(key_file.content)
            except SExpressionError as exc:
                logger.debug("Skipping %s: %s", key_file.path, exc)
                continue
            if agent_key.is_shadowed or material is None or not agent_key.matches(material):
                continue

            record = SecretKeyRecord(
                public_key=public_key,
                format="agent",
                material=key_file.content,
                source=key_file.path,
                is_protected=agent_key.is_protected,
            )
            if source is None:
                return record

            passphrase = source.get(record) if agent_key.is_protected else None
            try:
                record.attach_unlocked(
                    unlock_agent_key(agent_key, public_key, passphrase, self.context)
                )
            except DecryptionFailed as exc:
                logger.debug("%s did not decrypt: %s", key_file.path, exc)
                if first_error is None:
                    first_error = exc
                continue
            logger.info("Resolved secret key %s in %s", public_key.key_id, key_file.path)
            return record

        if first_error is not None:
            raise first_error
        raise SecretKeyNotFound(
            f"no secret key for {public_key.fingerprint_hex}", key_id=str(wanted), path=directory
        )
