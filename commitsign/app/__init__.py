"""Application layer: key resolution, passphrase handling and signing services."""

from commitsign.app.key_locator import KeyLocator
from commitsign.app.passphrase import PassphraseRetryCoordinator
from commitsign.app.secret_key_resolver import SecretKeyResolver
from commitsign.app.signature_service import CommitSigner, SignatureEngine, SignatureVerifier

__all__ = [
    "KeyLocator",
    "SecretKeyResolver",
    "PassphraseRetryCoordinator",
    "SignatureEngine",
    "SignatureVerifier",
    "CommitSigner",
]
