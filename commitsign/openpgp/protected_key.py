"""gpg-agent secret key files (``private-keys-v1.d``) and their protection.

A key file holds one S-expression. Unprotected keys carry their secret
parameters in the clear; protected keys keep them inside a ``protected``
element encrypted with a key derived from the passphrase (OpenPGP
iterated and salted S2K over SHA-1, AES-128). Two protection modes exist:

* ``openpgp-s2k3-sha1-aes-cbc`` encrypts the parameters together with a
  SHA-1 MIC computed over the whole key in canonical form.
* ``openpgp-s2k3-ocb-aes`` uses AES-OCB with the cleartext parts of the
  key as associated data.
"""

from __future__ import annotations

import hashlib
import hmac
from dataclasses import dataclass

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes
from cryptography.hazmat.primitives.ciphers.aead import AESOCB3

from commitsign.errors import DecryptionFailed, KeyDecodeFailed
from commitsign.openpgp.context import PROTECTION_CBC, PROTECTION_OCB, CryptoContext
from commitsign.openpgp.packets import PublicKeyMaterial
from commitsign.openpgp.sexpr import (
    SExpression,
    SExpressionError,
    dump_canonical,
    load_key_expression,
    parse_canonical,
)
from commitsign.utils.secure import wipe

KIND_PRIVATE = b"private-key"
KIND_PROTECTED = b"protected-private-key"
KIND_SHADOWED = b"shadowed-private-key"

_KINDS = frozenset({KIND_PRIVATE, KIND_PROTECTED, KIND_SHADOWED})

_AGENT_FAMILIES = {
    b"rsa": "rsa",
    b"dsa": "dsa",
    b"elg": "elg",
    b"openpgp-elg": "elg",
    b"ecc": "ecc",
    b"ecdsa": "ecc",
    b"eddsa": "ecc",
    b"ecdh": "ecc",
}
_OPENPGP_FAMILIES = {
    "rsa": "rsa",
    "dsa": "dsa",
    "elg": "elg",
    "ecdh": "ecc",
    "ecdsa": "ecc",
    "eddsa": "ecc",
}
SECRET_ELEMENTS: dict[str, tuple[str, ...]] = {
    "rsa": ("d", "p", "q", "u"),
    "dsa": ("x",),
    "elg": ("x",),
    "ecc": ("d",),
}


def derive_s2k_key(passphrase: bytes, salt: bytes, count: int, length: int) -> bytes:
    """Derive ``length`` key bytes with iterated and salted S2K over SHA-1.

    ``count`` is the number of octets to hash; values below 256 are taken
    as the one-octet coded form.
    """
    if count < 256:
        count = (16 + (count & 15)) << ((count >> 4) + 6)
    data = bytes(salt) + bytes(passphrase)
    count = max(count, len(data))
    block = data * max(1, 8192 // len(data))

    derived = b""
    preload = 0
    while len(derived) < length:
        digest = hashlib.sha1(b"\x00" * preload)
        remaining = count
        while remaining >= len(block):
            digest.update(block)
            remaining -= len(block)
        digest.update(block[:remaining])
        derived += digest.digest()
        preload += 1
    return derived[:length]


def _to_int(value: bytes) -> int:
    return int.from_bytes(value, "big")


@dataclass(frozen=True, slots=True)
class AgentKey:
    """Parsed gpg-agent key: its kind, algorithm and algorithm elements."""

    kind: bytes
    algorithm: bytes
    elements: tuple[SExpression, ...]

    @property
    def family(self) -> str | None:
        return _AGENT_FAMILIES.get(self.algorithm)

    @property
    def is_protected(self) -> bool:
        return self.kind == KIND_PROTECTED

    @property
    def is_shadowed(self) -> bool:
        return self.kind == KIND_SHADOWED

    def parameters(self) -> dict[str, bytes]:
        """Return the ``(name value)`` elements stored in the clear."""
        found: dict[str, bytes] = {}
        for element in self.elements:
            if (
                isinstance(element, list)
                and len(element) == 2
                and isinstance(element[0], bytes)
                and isinstance(element[1], bytes)
            ):
                found.setdefault(element[0].decode("ascii", "replace"), element[1])
        return found

    def matches(self, public: PublicKeyMaterial) -> bool:
        """Whether the cleartext public parameters equal those of ``public``."""
        family = self.family
        if family is None or family != _OPENPGP_FAMILIES.get(public.algorithm_name):
            return False
        ours = self.parameters()
        for name, value in public.params.items():
            if name in ("oid", "kdf"):
                continue
            mine = ours.get(name)
            if mine is None or _to_int(mine) != _to_int(value):
                return False
        return True

    def unprotect(self, passphrase: bytes | bytearray | None, context: CryptoContext) -> dict[str, bytes]:
        """Return the secret parameters, decrypting them with ``passphrase`` if needed.

        Raises:
            DecryptionFailed: Wrong passphrase or corrupt ciphertext.
            KeyDecodeFailed: Unsupported protection or inconsistent key.
        """
        family = self.family
        if family is None:
            raise KeyDecodeFailed(f"unsupported key algorithm {self.algorithm.decode('ascii', 'replace')}")
        if self.is_shadowed:
            raise KeyDecodeFailed("secret key is held by a smartcard")
        if self.kind == KIND_PRIVATE:
            secret = _collect_secret(family, self.elements)
            _check_consistency(family, self.parameters(), secret)
            return secret

        index = next(
            (
                position
                for position, element in enumerate(self.elements)
                if isinstance(element, list) and element and element[0] == b"protected"
            ),
            None,
        )
        if index is None:
            raise KeyDecodeFailed("protected key has no protection element")
        protected = self.elements[index]
        mode, salt, count, iv, ciphertext = _protection_parameters(protected)
        if not context.supports(mode):
            raise KeyDecodeFailed(f"unsupported key protection {mode}")
        if passphrase is None:
            raise DecryptionFailed("a passphrase is required to unlock this key")

        key = derive_s2k_key(passphrase, salt, count, context.s2k_key_length)
        before = list(self.elements[:index])
        after = list(self.elements[index + 1 :])
        if mode == PROTECTION_CBC:
            params = self._decrypt_cbc(key, iv, ciphertext, before, after)
        else:
            params = self._decrypt_ocb(key, iv, ciphertext, before, after)

        secret = _collect_secret(family, params)
        _check_consistency(family, self.parameters(), secret)
        return secret

    def _decrypt_cbc(
        self,
        key: bytes,
        iv: bytes,
        ciphertext: bytes,
        before: list[SExpression],
        after: list[SExpression],
    ) -> list[SExpression]:
        if not ciphertext or len(ciphertext) % 16 or len(iv) != 16:
            raise KeyDecodeFailed("malformed CBC-protected key")
        decryptor = Cipher(algorithms.AES(key), modes.CBC(iv)).decryptor()
        plaintext = bytearray(len(ciphertext) + 15)
        try:
            decryptor.update_into(ciphertext, plaintext)
            decryptor.finalize()
            try:
                parsed = parse_canonical(plaintext, allow_trailing=True)
            except SExpressionError as exc:
                raise DecryptionFailed("bad passphrase or corrupt key") from exc
        finally:
            wipe(plaintext)

        if (
            len(parsed) < 2
            or not isinstance(parsed[0], list)
            or not isinstance(parsed[1], list)
            or parsed[1][:2] != [b"hash", b"sha1"]
            or len(parsed[1]) != 3
        ):
            raise DecryptionFailed("bad passphrase or corrupt key")
        params = parsed[0]
        mic = hashlib.sha1(dump_canonical([self.algorithm, *before, *params, *after])).digest()
        if not isinstance(parsed[1][2], bytes) or not hmac.compare_digest(mic, parsed[1][2]):
            raise DecryptionFailed("bad passphrase or corrupt key")
        return params

    def _decrypt_ocb(
        self,
        key: bytes,
        nonce: bytes,
        ciphertext: bytes,
        before: list[SExpression],
        after: list[SExpression],
    ) -> list[SExpression]:
        if len(nonce) != 12 or len(ciphertext) <= 16:
            raise KeyDecodeFailed("malformed OCB-protected key")
        associated = dump_canonical([self.algorithm, *before, *after])
        try:
            plaintext = AESOCB3(key).decrypt(nonce, ciphertext, associated)
        except InvalidTag as exc:
            raise DecryptionFailed("bad passphrase or corrupt key") from exc
        try:
            parsed = parse_canonical(plaintext, allow_trailing=True)
        except SExpressionError as exc:
            raise KeyDecodeFailed("authenticated key payload is malformed") from exc
        if not parsed or not isinstance(parsed[0], list):
            raise KeyDecodeFailed("authenticated key payload is malformed")
        return parsed[0]


def _protection_parameters(protected: list[SExpression]) -> tuple[str, bytes, int, bytes, bytes]:
    try:
        _, mode, (s2k, iv), ciphertext = protected
        hash_name, salt, count = s2k
        mode_name = mode.decode("ascii")
        count_value = int(count)
    except (TypeError, ValueError, AttributeError) as exc:
        raise KeyDecodeFailed("malformed protection parameters") from exc
    if mode_name not in (PROTECTION_CBC, PROTECTION_OCB):
        raise KeyDecodeFailed(f"unsupported key protection {mode_name}")
    if hash_name != b"sha1" or not isinstance(salt, bytes) or len(salt) != 8:
        raise KeyDecodeFailed("unsupported S2K parameters")
    if not isinstance(iv, bytes) or not isinstance(ciphertext, bytes):
        raise KeyDecodeFailed("malformed protection parameters")
    return mode_name, salt, count_value, iv, ciphertext


def _collect_secret(family: str, elements: list[SExpression] | tuple[SExpression, ...]) -> dict[str, bytes]:
    values: dict[str, bytes] = {}
    for element in elements:
        if isinstance(element, list) and len(element) == 2 and all(isinstance(e, bytes) for e in element):
            values[element[0].decode("ascii", "replace")] = element[1]
    missing = [name for name in SECRET_ELEMENTS[family] if name not in values]
    if missing:
        raise KeyDecodeFailed(f"secret key lacks {', '.join(missing)}")
    return {name: values[name] for name in SECRET_ELEMENTS[family]}


def _check_consistency(family: str, public: dict[str, bytes], secret: dict[str, bytes]) -> None:
    if family == "rsa" and "n" in public:
        if _to_int(secret["p"]) * _to_int(secret["q"]) != _to_int(public["n"]):
            raise KeyDecodeFailed("RSA secret parameters do not match the modulus")


def load_agent_key(data: bytes) -> AgentKey:
    """Parse the contents of a private-keys-v1.d file.

    Raises:
        SExpressionError: If ``data`` is not a secret key expression.
    """
    expression = load_key_expression(data)
    if len(expression) < 2 or expression[0] not in _KINDS:
        raise SExpressionError("not a secret key expression")
    body = expression[1]
    if not isinstance(body, list) or not body or not isinstance(body[0], bytes):
        raise SExpressionError("secret key expression lacks an algorithm")
    return AgentKey(kind=expression[0], algorithm=body[0], elements=tuple(body[1:]))
