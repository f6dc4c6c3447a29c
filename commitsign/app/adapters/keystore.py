"""Filesystem adapter for GnuPG keybox, agent key directory and legacy keyring."""

from __future__ import annotations

import logging
import os
from collections.abc import Iterator
from pathlib import Path
from typing import BinaryIO

import pgpy
from pgpy.errors import PGPError

from commitsign.app.ports import KeyStorePort, PublicKeyRecord, SecretKeyFile, SecretKeyRecord
from commitsign.errors import KeyStoreCorrupt, KeyStoreNotFound
from commitsign.openpgp.keybox import KeyboxError, iter_openpgp_blobs
from commitsign.openpgp.packets import (
    TAG_PUBLIC_KEY,
    PacketError,
    UnsupportedKey,
    iter_key_materials,
    iter_packets,
    parse_public_key,
)

logger = logging.getLogger(__name__)


def _read_store(path: Path, what: str) -> bytes:
    try:
        return path.read_bytes()
    except FileNotFoundError as exc:
        raise KeyStoreNotFound(f"{what} does not exist", path=path) from exc
    except IsADirectoryError as exc:
        raise KeyStoreCorrupt(f"{what} is a directory", path=path) from exc
    except OSError as exc:
        raise KeyStoreCorrupt(f"cannot read {what}: {exc.strerror or exc}", path=path) from exc


class GnuPGKeyStoreAdapter(KeyStorePort):
    """Adapter that reads GnuPG key stores directly from disk.

    Nothing is cached: every call re-reads its source.
    """

    def open_keybox(self, path: Path) -> Iterator[PublicKeyRecord]:
        keybox = Path(path)
        try:
            handle = keybox.open("rb")
        except FileNotFoundError as exc:
            raise KeyStoreNotFound("keybox does not exist", path=keybox) from exc
        except OSError as exc:
            raise KeyStoreCorrupt(f"cannot read keybox: {exc.strerror or exc}", path=keybox) from exc
        return self._iter_keybox(handle, keybox)

    def _iter_keybox(self, handle: BinaryIO, keybox: Path) -> Iterator[PublicKeyRecord]:
        with handle:
            try:
                for blob in iter_openpgp_blobs(handle):
                    first = next(iter_packets(blob.keyblock), None)
                    if first is None or first.tag != TAG_PUBLIC_KEY:
                        raise KeyStoreCorrupt(
                            f"blob at offset {blob.offset} does not hold a public key", path=keybox
                        )
                    try:
                        material, _ = parse_public_key(first.body)
                    except UnsupportedKey as exc:
                        logger.debug("Skipping keybox blob at offset %d: %s", blob.offset, exc)
                        continue
                    if material.fingerprint != blob.keys[0].fingerprint:
                        raise KeyStoreCorrupt(
                            f"keyblock at offset {blob.offset} does not match its key info",
                            path=keybox,
                        )
                    yield PublicKeyRecord.from_material(
                        material,
                        blob.keyblock,
                        source=keybox,
                        key_fingerprints=tuple(info.fingerprint for info in blob.keys),
                    )
            except (KeyboxError, PacketError) as exc:
                raise KeyStoreCorrupt(f"malformed keybox: {exc}", path=keybox) from exc
            except OSError as exc:
                raise KeyStoreCorrupt(f"cannot read keybox: {exc.strerror or exc}", path=keybox) from exc

    def open_secret_directory(self, path: Path) -> Iterator[SecretKeyFile]:
        root = Path(path)
        if not root.is_dir():
            raise KeyStoreNotFound("secret key directory does not exist", path=root)
        return self._iter_secret_files(root)

    def _iter_secret_files(self, root: Path) -> Iterator[SecretKeyFile]:
        for directory, dirnames, filenames in os.walk(root):
            dirnames.sort()
            for name in sorted(filenames):
                file_path = Path(directory) / name
                if not file_path.is_file():
                    continue
                yield SecretKeyFile(path=file_path, content=_read_store(file_path, "secret key file"))

    def open_legacy_secret_keyring(self, path: Path) -> Iterator[SecretKeyRecord]:
        keyring = Path(path)
        data = _read_store(keyring, "secret keyring")
        return self._iter_legacy_records(_load_keyring(data, keyring), keyring)

    def _iter_legacy_records(
        self, rings: list[pgpy.PGPKey], keyring: Path
    ) -> Iterator[SecretKeyRecord]:
        for ring in rings:
            if ring.is_public:
                raise KeyStoreCorrupt(
                    f"public key {ring.fingerprint.keyid} found in a secret keyring", path=keyring
                )
            certificate = bytes(ring.pubkey)
            try:
                materials = {
                    material.fingerprint: material for material in iter_key_materials(certificate)
                }
            except UnsupportedKey as exc:
                logger.debug("Skipping secret key %s: %s", ring.fingerprint.keyid, exc)
                continue
            except PacketError as exc:
                raise KeyStoreCorrupt(f"malformed secret key: {exc}", path=keyring) from exc

            material = bytes(ring)
            keys = [ring, *ring.subkeys.values()]
            fingerprints = tuple(_fingerprint_bytes(key) for key in keys)
            for key, fingerprint in zip(keys, fingerprints):
                yield SecretKeyRecord(
                    public_key=PublicKeyRecord.from_material(
                        materials[fingerprint],
                        certificate,
                        source=keyring,
                        key_fingerprints=fingerprints,
                    ),
                    format="keyring",
                    material=material,
                    source=keyring,
                    is_protected=key.is_protected,
                )


def _fingerprint_bytes(key: pgpy.PGPKey) -> bytes:
    return bytes.fromhex(str(key.fingerprint).replace(" ", ""))


def _load_keyring(data: bytes, keyring: Path) -> list[pgpy.PGPKey]:
    """Load every transferable key of a keyring, in file order."""
    if not data:
        return []
    try:
        first, others = pgpy.PGPKey.from_blob(data)
    except (PGPError, ValueError, TypeError, NotImplementedError) as exc:
        raise KeyStoreCorrupt(f"malformed secret keyring: {exc}", path=keyring) from exc
    # Depending on the pgpy release, ``others`` may or may not repeat ``first``.
    return [first, *(key for key in others.values() if key is not first)]
