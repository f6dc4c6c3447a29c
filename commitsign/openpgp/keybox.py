"""Reader for GnuPG keybox (``pubring.kbx``) containers."""

from __future__ import annotations

import hashlib
import hmac
import logging
from collections.abc import Iterator
from dataclasses import dataclass
from typing import BinaryIO

logger = logging.getLogger(__name__)

KEYBOX_MAGIC = b"KBXf"

BLOB_EMPTY = 0
BLOB_HEADER = 1
BLOB_OPENPGP = 2
BLOB_X509 = 3

_MAX_BLOB_LENGTH = 16 * 1024 * 1024
_MIN_KEY_INFO_SIZE = 28
_CHECKSUM_SIZE = 20


class KeyboxError(ValueError):
    """Raised when a keybox container is malformed."""


@dataclass(frozen=True, slots=True)
class KeyInfo:
    """Fingerprint entry stored in an OpenPGP blob."""

    fingerprint: bytes
    flags: int

    @property
    def fingerprint_hex(self) -> str:
        return self.fingerprint.hex().upper()


@dataclass(frozen=True, slots=True)
class OpenPGPBlob:
    """An OpenPGP certificate blob; ``keys[0]`` is the primary key."""

    offset: int
    flags: int
    keys: tuple[KeyInfo, ...]
    keyblock: bytes


def _u16(blob: bytes, pos: int) -> int:
    return int.from_bytes(blob[pos : pos + 2], "big")


def _u32(blob: bytes, pos: int) -> int:
    return int.from_bytes(blob[pos : pos + 4], "big")


def _verify_checksum(blob: bytes, offset: int) -> None:
    if len(blob) < _CHECKSUM_SIZE:
        raise KeyboxError(f"blob at offset {offset} is too short for a checksum")
    stored = blob[-_CHECKSUM_SIZE:]
    if stored[:4] == b"\x00\x00\x00\x00":
        # Older keyboxes store an MD5 checksum behind four zero octets.
        return
    actual = hashlib.sha1(blob[:-_CHECKSUM_SIZE]).digest()
    if not hmac.compare_digest(stored, actual):
        raise KeyboxError(f"checksum mismatch in blob at offset {offset}")


def _parse_openpgp_blob(blob: bytes, offset: int) -> OpenPGPBlob:
    if len(blob) < 20 + _CHECKSUM_SIZE:
        raise KeyboxError(f"OpenPGP blob at offset {offset} is truncated")
    _verify_checksum(blob, offset)

    flags = _u16(blob, 6)
    keyblock_offset = _u32(blob, 8)
    keyblock_length = _u32(blob, 12)
    key_count = _u16(blob, 16)
    key_info_size = _u16(blob, 18)

    if key_count == 0:
        raise KeyboxError(f"OpenPGP blob at offset {offset} lists no keys")
    if key_info_size < _MIN_KEY_INFO_SIZE:
        raise KeyboxError(f"key info size {key_info_size} too small at offset {offset}")
    infos_end = 20 + key_count * key_info_size
    if infos_end > len(blob) - _CHECKSUM_SIZE:
        raise KeyboxError(f"key infos overrun blob at offset {offset}")
    if keyblock_offset + keyblock_length > len(blob) - _CHECKSUM_SIZE:
        raise KeyboxError(f"keyblock overruns blob at offset {offset}")
    if keyblock_offset < infos_end:
        raise KeyboxError(f"keyblock overlaps key infos at offset {offset}")

    keys = []
    for index in range(key_count):
        start = 20 + index * key_info_size
        keys.append(
            KeyInfo(
                fingerprint=bytes(blob[start : start + 20]),
                flags=_u16(blob, start + 24),
            )
        )

    return OpenPGPBlob(
        offset=offset,
        flags=flags,
        keys=tuple(keys),
        keyblock=bytes(blob[keyblock_offset : keyblock_offset + keyblock_length]),
    )


def iter_openpgp_blobs(stream: BinaryIO) -> Iterator[OpenPGPBlob]:
    """Stream OpenPGP blobs from an open keybox in container order.

    The first blob must be the keybox header. Empty and X.509 blobs are
    skipped.

    Raises:
        KeyboxError: If the container is truncated or a blob is malformed.
    """
    offset = 0
    first = True
    while True:
        prefix = stream.read(4)
        if not prefix:
            if first:
                raise KeyboxError("keybox is empty")
            return
        if len(prefix) < 4:
            raise KeyboxError(f"truncated blob length at offset {offset}")
        length = int.from_bytes(prefix, "big")
        if length < 6 or length > _MAX_BLOB_LENGTH:
            raise KeyboxError(f"invalid blob length {length} at offset {offset}")
        rest = stream.read(length - 4)
        if len(rest) < length - 4:
            raise KeyboxError(f"truncated blob at offset {offset}")
        blob = prefix + rest
        blob_type = blob[4]

        if first:
            if blob_type != BLOB_HEADER or blob[8:12] != KEYBOX_MAGIC:
                raise KeyboxError("missing keybox header blob")
            first = False
        elif blob_type == BLOB_OPENPGP:
            yield _parse_openpgp_blob(blob, offset)
        elif blob_type in (BLOB_EMPTY, BLOB_X509):
            logger.debug("Skipping keybox blob type %d at offset %d", blob_type, offset)
        elif blob_type == BLOB_HEADER:
            raise KeyboxError(f"unexpected header blob at offset {offset}")
        else:
            logger.debug("Skipping unknown keybox blob type %d at offset %d", blob_type, offset)
        offset += length
