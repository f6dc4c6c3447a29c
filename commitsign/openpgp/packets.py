"""OpenPGP packet framing and version 4 key material (RFC 4880)."""

from __future__ import annotations

import hashlib
from collections.abc import Iterator, Mapping
from dataclasses import dataclass

TAG_SIGNATURE = 2
TAG_SECRET_KEY = 5
TAG_PUBLIC_KEY = 6
TAG_SECRET_SUBKEY = 7
TAG_TRUST = 12
TAG_USER_ID = 13
TAG_PUBLIC_SUBKEY = 14
TAG_USER_ATTRIBUTE = 17

KEY_TAGS = frozenset({TAG_SECRET_KEY, TAG_PUBLIC_KEY, TAG_SECRET_SUBKEY, TAG_PUBLIC_SUBKEY})

ALGORITHM_NAMES: dict[int, str] = {
    1: "rsa",
    2: "rsa",
    3: "rsa",
    16: "elg",
    17: "dsa",
    18: "ecdh",
    19: "ecdsa",
    20: "elg",
    22: "eddsa",
}

PUBLIC_PARAMETERS: dict[str, tuple[str, ...]] = {
    "rsa": ("n", "e"),
    "dsa": ("p", "q", "g", "y"),
    "elg": ("p", "g", "y"),
    "ecdh": ("oid", "q", "kdf"),
    "ecdsa": ("oid", "q"),
    "eddsa": ("oid", "q"),
}

SECRET_PARAMETERS: dict[str, tuple[str, ...]] = {
    "rsa": ("d", "p", "q", "u"),
    "dsa": ("x",),
    "elg": ("x",),
    "ecdh": ("d",),
    "ecdsa": ("d",),
    "eddsa": ("d",),
}

# Fields stored with a one-octet length prefix instead of as MPIs.
_PREFIXED_FIELDS = frozenset({"oid", "kdf"})


class PacketError(ValueError):
    """Raised when OpenPGP data cannot be framed or decoded."""


class UnsupportedKey(PacketError):
    """Raised for well-formed keys of a version or algorithm that is not handled."""


@dataclass(frozen=True, slots=True)
class Packet:
    """A single framed packet."""

    tag: int
    body: bytes
    offset: int = 0

    def encode(self) -> bytes:
        return encode_packet(self.tag, self.body)


@dataclass(frozen=True, slots=True)
class PublicKeyMaterial:
    """Public part of a version 4 key packet."""

    created: int
    algorithm: int
    params: Mapping[str, bytes]
    body: bytes

    @property
    def algorithm_name(self) -> str:
        return ALGORITHM_NAMES[self.algorithm]

    @property
    def fingerprint(self) -> bytes:
        return hashlib.sha1(
            b"\x99" + len(self.body).to_bytes(2, "big") + self.body
        ).digest()

    @property
    def key_id(self) -> str:
        return self.fingerprint[-8:].hex().upper()


def _read_new_length(data: bytes, pos: int) -> tuple[int, int]:
    if pos >= len(data):
        raise PacketError("truncated packet length")
    first = data[pos]
    if first < 192:
        return first, pos + 1
    if first < 224:
        if pos + 2 > len(data):
            raise PacketError("truncated packet length")
        return ((first - 192) << 8) + data[pos + 1] + 192, pos + 2
    if first == 255:
        if pos + 5 > len(data):
            raise PacketError("truncated packet length")
        return int.from_bytes(data[pos + 1 : pos + 5], "big"), pos + 5
    raise PacketError("partial body lengths are not valid in key material")


def iter_packets(data: bytes) -> Iterator[Packet]:
    """Yield packets framed in ``data`` in order.

    Raises:
        PacketError: If a header is invalid or a packet overruns the buffer.
    """
    pos = 0
    end = len(data)
    while pos < end:
        start = pos
        ctb = data[pos]
        if not ctb & 0x80:
            raise PacketError(f"invalid packet header 0x{ctb:02x} at offset {start}")
        pos += 1
        if ctb & 0x40:
            tag = ctb & 0x3F
            length, pos = _read_new_length(data, pos)
        else:
            tag = (ctb >> 2) & 0x0F
            length_type = ctb & 0x03
            if length_type == 3:
                length = end - pos
            else:
                size = (1, 2, 4)[length_type]
                if pos + size > end:
                    raise PacketError(f"truncated packet length at offset {start}")
                length = int.from_bytes(data[pos : pos + size], "big")
                pos += size
        if pos + length > end:
            raise PacketError(f"packet at offset {start} overruns the buffer")
        yield Packet(tag=tag, body=bytes(data[pos : pos + length]), offset=start)
        pos += length


def encode_packet(tag: int, body: bytes) -> bytes:
    """Frame ``body`` with a new-format header."""
    length = len(body)
    if length < 192:
        header = bytes([length])
    elif length < 8384:
        adjusted = length - 192
        header = bytes([(adjusted >> 8) + 192, adjusted & 0xFF])
    else:
        header = b"\xff" + length.to_bytes(4, "big")
    return bytes([0xC0 | tag]) + header + bytes(body)


def read_mpi(data: bytes, pos: int) -> tuple[bytes, int]:
    """Read a multiprecision integer at ``pos``; return its magnitude and the next offset."""
    if pos + 2 > len(data):
        raise PacketError("truncated MPI header")
    bits = int.from_bytes(data[pos : pos + 2], "big")
    start = pos + 2
    stop = start + (bits + 7) // 8
    if stop > len(data):
        raise PacketError("truncated MPI value")
    return bytes(data[start:stop]), stop


def encode_mpi(value: bytes) -> bytes:
    stripped = bytes(value).lstrip(b"\x00")
    bits = int.from_bytes(stripped, "big").bit_length()
    return bits.to_bytes(2, "big") + stripped


def _read_prefixed(data: bytes, pos: int) -> tuple[bytes, int]:
    if pos >= len(data):
        raise PacketError("truncated field length")
    size = data[pos]
    if size in (0, 0xFF):
        raise PacketError(f"reserved field length {size}")
    stop = pos + 1 + size
    if stop > len(data):
        raise PacketError("truncated field")
    return bytes(data[pos + 1 : stop]), stop


def parse_public_key(body: bytes) -> tuple[PublicKeyMaterial, int]:
    """Parse the public portion of a key packet body.

    Works for both public and secret key packets; the returned offset marks
    where secret material (if any) begins.
    """
    if len(body) < 6:
        raise PacketError("truncated key packet")
    if body[0] != 4:
        raise UnsupportedKey(f"unsupported key packet version {body[0]}")
    created = int.from_bytes(body[1:5], "big")
    algorithm = body[5]
    name = ALGORITHM_NAMES.get(algorithm)
    if name is None:
        raise UnsupportedKey(f"unsupported public key algorithm {algorithm}")

    pos = 6
    params: dict[str, bytes] = {}
    for param in PUBLIC_PARAMETERS[name]:
        if param in _PREFIXED_FIELDS:
            params[param], pos = _read_prefixed(body, pos)
        else:
            params[param], pos = read_mpi(body, pos)

    material = PublicKeyMaterial(
        created=created,
        algorithm=algorithm,
        params=params,
        body=bytes(body[:pos]),
    )
    return material, pos


def build_unprotected_secret_body(
    public: PublicKeyMaterial, secret: Mapping[str, bytes]
) -> bytearray:
    """Assemble an unprotected secret key body from public and secret parameters."""
    names = SECRET_PARAMETERS[public.algorithm_name]
    missing = [name for name in names if name not in secret]
    if missing:
        raise PacketError(f"missing secret parameters: {', '.join(missing)}")
    body = bytearray(public.body)
    body.append(0)
    mpis = bytearray()
    for name in names:
        mpis += encode_mpi(secret[name])
    body += mpis
    body += (sum(mpis) & 0xFFFF).to_bytes(2, "big")
    return body


def to_secret_certificate(keyblock: bytes, secret_body: bytes) -> bytearray:
    """Replace the primary public key of ``keyblock`` with ``secret_body``.

    User IDs and their certifications are kept; subkeys are dropped because
    their secret halves are not part of ``secret_body``.
    """
    out = bytearray()
    seen_primary = False
    for packet in iter_packets(keyblock):
        if packet.tag == TAG_TRUST:
            continue
        if packet.tag == TAG_PUBLIC_KEY:
            if seen_primary:
                break
            seen_primary = True
            out += encode_packet(TAG_SECRET_KEY, secret_body)
            continue
        if not seen_primary:
            raise PacketError("keyblock does not start with a public key")
        if packet.tag == TAG_PUBLIC_SUBKEY:
            break
        out += packet.encode()
    if not seen_primary:
        raise PacketError("keyblock holds no public key")
    return out


def iter_key_materials(keyblock: bytes) -> Iterator[PublicKeyMaterial]:
    """Yield the public material of every key and subkey packet in ``keyblock``."""
    for packet in iter_packets(keyblock):
        if packet.tag in KEY_TAGS:
            yield parse_public_key(packet.body)[0]
