"""Key store port interface and key record DTOs."""

from __future__ import annotations

import re
from collections.abc import Iterator
from pathlib import Path
from typing import Any, Literal, Protocol

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, field_validator

from commitsign.openpgp.packets import PublicKeyMaterial, iter_key_materials

_HEX_IDENTIFIER = re.compile(r"^[0-9A-F]{16,40}$")


class KeyIdentifier(BaseModel):
    """Hex key identifier matched as a suffix of full fingerprints."""

    model_config = ConfigDict(frozen=True)

    value: str = Field(..., description="Uppercase hex, 16 to 40 digits")

    @field_validator("value", mode="before")
    @classmethod
    def _normalize(cls, value: Any) -> str:
        if not isinstance(value, str):
            raise ValueError("key identifier must be a string")
        text = value.strip().replace(" ", "").upper()
        if text.startswith("0X"):
            text = text[2:]
        if not _HEX_IDENTIFIER.match(text):
            raise ValueError(f"key identifier must be 16 to 40 hex digits, got {value!r}")
        return text

    @classmethod
    def parse(cls, value: str) -> KeyIdentifier:
        return cls(value=value)

    def matches(self, fingerprint: bytes | str) -> bool:
        """Whether ``fingerprint`` ends with this identifier."""
        if isinstance(fingerprint, (bytes, bytearray)):
            fingerprint = fingerprint.hex()
        return fingerprint.upper().endswith(self.value)

    def __str__(self) -> str:
        return self.value


class PublicKeyRecord(BaseModel):
    """Public key located in a key store, with the certificate it belongs to."""

    model_config = ConfigDict(frozen=True)

    fingerprint: bytes = Field(..., description="20-octet v4 fingerprint")
    key_id: str = Field(..., description="Uppercase hex of the low 64 bits of the fingerprint")
    algorithm: int = Field(..., description="OpenPGP public key algorithm number")
    algorithm_name: str = Field(..., description="Short algorithm family name (rsa, dsa, eddsa, ...)")
    created: int = Field(..., ge=0, description="Key creation time (seconds since the epoch)")
    keyblock: bytes = Field(..., repr=False, description="Public certificate packets")
    key_fingerprints: tuple[bytes, ...] = Field(
        default=(), description="Fingerprints of every key in the certificate, primary first"
    )
    source: Path | None = Field(None, description="Key store the record was read from")

    @property
    def fingerprint_hex(self) -> str:
        return self.fingerprint.hex().upper()

    @classmethod
    def from_material(
        cls,
        material: PublicKeyMaterial,
        keyblock: bytes,
        source: Path | None = None,
        key_fingerprints: tuple[bytes, ...] = (),
    ) -> PublicKeyRecord:
        return cls(
            fingerprint=material.fingerprint,
            key_id=material.key_id,
            algorithm=material.algorithm,
            algorithm_name=material.algorithm_name,
            created=material.created,
            keyblock=keyblock,
            key_fingerprints=key_fingerprints or (material.fingerprint,),
            source=source,
        )

    def find_material(self, key_id: str | None = None) -> PublicKeyMaterial | None:
        """Return key material from the certificate by key id (primary key when ``None``)."""
        wanted = (key_id or self.key_id).upper()
        for material in iter_key_materials(self.keyblock):
            if material.key_id == wanted:
                return material
        return None


class SecretKeyRecord(BaseModel):
    """Encrypted secret key together with the public key it belongs to.

    ``material`` is the file or keyring content exactly as stored. A key the
    resolver already unlocked while choosing between candidate files is kept
    in a private slot until the signing engine consumes it.
    """

    model_config = ConfigDict(frozen=True)

    public_key: PublicKeyRecord
    format: Literal["agent", "keyring"] = Field(
        ..., description="agent: private-keys-v1.d file; keyring: transferable secret key"
    )
    material: bytes = Field(..., repr=False)
    source: Path
    is_protected: bool = True

    _unlocked: Any = PrivateAttr(default=None)

    @property
    def key_id(self) -> str:
        return self.public_key.key_id

    def attach_unlocked(self, key: Any) -> None:
        self._unlocked = key

    def take_unlocked(self) -> Any:
        key, self._unlocked = self._unlocked, None
        return key


class SecretKeyFile(BaseModel):
    """A file from the secret key directory."""

    model_config = ConfigDict(frozen=True)

    path: Path
    content: bytes = Field(..., repr=False)


class KeyStorePort(Protocol):
    """Port interface for reading the three GnuPG key store layouts."""

    def open_keybox(self, path: Path) -> Iterator[PublicKeyRecord]:
        """Stream primary public keys of a keybox in container order.

        Each record lists the fingerprints of every key in its blob in
        ``key_fingerprints``.
        """
        ...

    def open_secret_directory(self, path: Path) -> Iterator[SecretKeyFile]:
        """Yield every regular file below ``path``, recursively."""
        ...

    def open_legacy_secret_keyring(self, path: Path) -> Iterator[SecretKeyRecord]:
        """Yield one record per secret key or subkey in a legacy keyring."""
        ...
