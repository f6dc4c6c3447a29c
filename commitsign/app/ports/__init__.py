"""Port interfaces for the commitsign application layer.

These protocol interfaces define contracts for adapters.
Domain logic depends on these ports, never on concrete implementations.
"""

__all__ = [
    "KeyIdentifier",
    "PublicKeyRecord",
    "SecretKeyRecord",
    "SecretKeyFile",
    "KeyStorePort",
    "CredentialPort",
    "SignerPort",
    "VerifierPort",
]

from commitsign.app.ports.credentials import CredentialPort
from commitsign.app.ports.keystore import (
    KeyIdentifier,
    KeyStorePort,
    PublicKeyRecord,
    SecretKeyFile,
    SecretKeyRecord,
)
from commitsign.app.ports.signer import SignerPort, VerifierPort
