"""Turn secret key records into signing-capable pgpy keys."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import ExitStack, contextmanager

import pgpy
from pgpy.errors import PGPDecryptionError, PGPError

from commitsign.app.ports import PublicKeyRecord, SecretKeyRecord
from commitsign.errors import DecryptionFailed, KeyDecodeFailed
from commitsign.openpgp.context import CryptoContext
from commitsign.openpgp.packets import PacketError, build_unprotected_secret_body, to_secret_certificate
from commitsign.openpgp.protected_key import AgentKey, load_agent_key
from commitsign.openpgp.sexpr import SExpressionError
from commitsign.utils.secure import wipe

logger = logging.getLogger(__name__)


def _load_pgpy_key(blob: bytes | bytearray) -> pgpy.PGPKey:
    try:
        key, _ = pgpy.PGPKey.from_blob(bytes(blob))
    except (PGPError, ValueError, TypeError, NotImplementedError) as exc:
        raise KeyDecodeFailed(f"cannot load key: {exc}") from exc
    return key


def unlock_agent_key(
    agent_key: AgentKey,
    public_key: PublicKeyRecord,
    passphrase: bytes | bytearray | None,
    context: CryptoContext,
) -> pgpy.PGPKey:
    """Decrypt an agent key file and load it as an unprotected pgpy key.

    The secret parameters are spliced into the public certificate found in
    the keybox, so the returned key carries its user IDs and self-signatures.

    Raises:
        DecryptionFailed: Wrong passphrase or corrupt secret material.
        KeyDecodeFailed: The key cannot be used for signing.
    """
    material = public_key.find_material()
    if material is None:
        raise KeyDecodeFailed(f"certificate {public_key.fingerprint_hex} lacks its primary key")
    secret = agent_key.unprotect(passphrase, context)
    body = bytearray()
    certificate = bytearray()
    try:
        body = build_unprotected_secret_body(material, secret)
        certificate = to_secret_certificate(public_key.keyblock, body)
        return _load_pgpy_key(certificate)
    except PacketError as exc:
        raise KeyDecodeFailed(f"cannot rebuild secret key: {exc}") from exc
    finally:
        wipe(body)
        wipe(certificate)
        secret.clear()


def _select_key(ring: pgpy.PGPKey, fingerprint_hex: str) -> pgpy.PGPKey:
    for key in [ring, *ring.subkeys.values()]:
        if str(key.fingerprint).replace(" ", "").upper() == fingerprint_hex:
            return key
    raise KeyDecodeFailed(f"keyring does not hold key {fingerprint_hex}")


def _decode_passphrase(passphrase: bytes | bytearray) -> str:
    # pgpy only accepts text passphrases.
    try:
        return bytes(passphrase).decode("utf-8")
    except UnicodeDecodeError as exc:
        raise DecryptionFailed("passphrase is not valid UTF-8") from exc


@contextmanager
def open_signing_key(
    record: SecretKeyRecord,
    passphrase: bytes | bytearray | None,
    context: CryptoContext,
) -> Iterator[pgpy.PGPKey]:
    """Yield an unlocked key for ``record``, re-locking it on exit.

    A key the resolver already decrypted is consumed directly; nothing is
    decrypted a second time.
    """
    unlocked = record.take_unlocked()
    if unlocked is not None:
        yield unlocked
        return

    if record.format == "agent":
        try:
            agent_key = load_agent_key(record.material)
        except SExpressionError as exc:
            raise KeyDecodeFailed(f"{record.source} is not a secret key file") from exc
        yield unlock_agent_key(agent_key, record.public_key, passphrase, context)
        return

    key = _select_key(_load_pgpy_key(record.material), record.public_key.fingerprint_hex)
    with ExitStack() as stack:
        if record.is_protected:
            if passphrase is None:
                raise DecryptionFailed(f"key {record.key_id} is protected and no passphrase was given")
            ring = key if key.is_primary else key.parent
            try:
                stack.enter_context(ring.unlock(_decode_passphrase(passphrase)))
            except PGPDecryptionError as exc:
                raise DecryptionFailed(f"bad passphrase for key {record.key_id}") from exc
            except PGPError as exc:
                raise KeyDecodeFailed(f"cannot unlock key {record.key_id}: {exc}") from exc
            logger.debug("Unlocked key %s from %s", record.key_id, record.source)
        yield key
