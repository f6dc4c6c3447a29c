"""Cryptography context shared by the signing components.

The context is created once per process by :func:`initialize_crypto_context`
and handed to components explicitly; nothing in the signing path reads it
from a global.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives.ciphers.aead import AESOCB3
from pgpy.constants import HashAlgorithm

logger = logging.getLogger(__name__)

PROTECTION_CBC = "openpgp-s2k3-sha1-aes-cbc"
PROTECTION_OCB = "openpgp-s2k3-ocb-aes"


@dataclass(frozen=True, slots=True)
class CryptoContext:
    """Algorithms available to key unprotection and signing."""

    signature_hash: HashAlgorithm
    protection_modes: frozenset[str]
    s2k_key_length: int = 16

    def supports(self, protection_mode: str) -> bool:
        return protection_mode in self.protection_modes


_context: CryptoContext | None = None
_context_lock = threading.Lock()


def _probe_protection_modes() -> frozenset[str]:
    modes = {PROTECTION_CBC}
    try:
        AESOCB3(bytes(16))
    except UnsupportedAlgorithm:
        logger.info("AES-OCB is unavailable in the cryptography backend; OCB-protected keys cannot be read")
    else:
        modes.add(PROTECTION_OCB)
    return frozenset(modes)


def initialize_crypto_context() -> CryptoContext:
    """Create the process-wide context on first call and return it afterwards."""
    global _context
    with _context_lock:
        if _context is None:
            _context = CryptoContext(
                signature_hash=HashAlgorithm.SHA256,
                protection_modes=_probe_protection_modes(),
            )
            logger.debug(
                "Initialized crypto context (protection modes: %s)",
                ", ".join(sorted(_context.protection_modes)),
            )
        return _context
