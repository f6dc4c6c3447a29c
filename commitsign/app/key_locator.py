"""Public key lookup in keybox containers."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path

from commitsign.app.ports import KeyIdentifier, KeyStorePort, PublicKeyRecord

logger = logging.getLogger(__name__)


def as_identifier(identifier: KeyIdentifier | str) -> KeyIdentifier:
    if isinstance(identifier, KeyIdentifier):
        return identifier
    return KeyIdentifier.parse(identifier)


class KeyLocator:
    """Find a public key whose fingerprint ends with a given identifier.

    Blobs are scanned in container order and every key of a blob (primary
    and subkeys) is compared. The first match wins; the record returned is
    the certificate holding the matching key.
    """

    def __init__(self, keystore: KeyStorePort):
        self.keystore = keystore

    def find_public_key(
        self,
        identifier: KeyIdentifier | str,
        keybox: Path | Iterable[PublicKeyRecord],
    ) -> PublicKeyRecord | None:
        """Return the first matching record, or None if no key matches.

        Args:
            identifier: Hex key identifier (16 to 40 digits)
            keybox: Keybox path, or records already streamed from one

        Raises:
            KeyStoreNotFound: If ``keybox`` is a path that does not exist.
            KeyStoreCorrupt: If the container is malformed before a match is found.
        """
        wanted = as_identifier(identifier)
        if isinstance(keybox, (str, Path)):
            records: Iterable[PublicKeyRecord] = self.keystore.open_keybox(Path(keybox))
        else:
            records = keybox

        try:
            for record in records:
                for fingerprint in record.key_fingerprints:
                    if wanted.matches(fingerprint):
                        logger.debug(
                            "Key %s matched certificate %s", wanted, record.fingerprint_hex
                        )
                        return record
        finally:
            close = getattr(records, "close", None)
            if close is not None:
                close()

        logger.debug("No key in keybox matches %s", wanted)
        return None
