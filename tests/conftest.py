"""Pytest configuration and fixtures."""

import gc
import shutil
import tempfile
import time
from collections.abc import Generator
from pathlib import Path

import pytest

import gnupg_fixtures
from commitsign.config import Settings
from commitsign.openpgp.context import CryptoContext, initialize_crypto_context
from gnupg_builders import GeneratedKey, agent_key_file, build_keybox, generate_key, make_gnupg_home

SIGNER_PASSPHRASE = "correct horse battery staple"


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    tmpdir = tempfile.mkdtemp()
    try:
        yield Path(tmpdir)
    finally:
        # Force garbage collection to release any file handles
        gc.collect()
        time.sleep(0.05)
        shutil.rmtree(tmpdir, ignore_errors=True)


@pytest.fixture
def override_settings(temp_dir: Path) -> Generator[Settings, None, None]:
    """Provide isolated commitsign settings scoped to tests."""

    import commitsign.config as config_module

    original_settings = getattr(config_module, "_settings", None)

    settings = config_module.Settings(gnupg_home=temp_dir / "gnupg")

    config_module._settings = settings

    try:
        yield settings
    finally:
        config_module._settings = original_settings


@pytest.fixture(scope="session")
def crypto_context() -> CryptoContext:
    return initialize_crypto_context()


@pytest.fixture(scope="session")
def signer_key() -> GeneratedKey:
    """Passphrase-protected RSA signing key."""
    return generate_key("Commit Signer", "signer@example.com", SIGNER_PASSPHRASE)


@pytest.fixture(scope="session")
def other_key() -> GeneratedKey:
    """Unrelated key that must never verify the signer's signatures."""
    return generate_key("Someone Else", "else@example.com", "another passphrase")


@pytest.fixture
def fixture_home(override_settings: Settings, temp_dir: Path) -> Path:
    """GnuPG 2.2 home holding the exported fixture keybox and agent key."""
    return make_gnupg_home(
        temp_dir,
        keybox=gnupg_fixtures.KEYBOX,
        agent_keys={"D1B3C7F8A2E4F60910BB3A0C5D6E7F8091A2B3C4.key": gnupg_fixtures.VALID_AGENT_KEY},
    )


@pytest.fixture
def agent_home(
    override_settings: Settings, temp_dir: Path, signer_key: GeneratedKey, other_key: GeneratedKey
) -> Path:
    """GnuPG home with two certificates in the keybox and their agent key files."""
    return make_gnupg_home(
        temp_dir,
        keybox=build_keybox(other_key.public_block, signer_key.public_block),
        agent_keys={
            "00-other.key": agent_key_file(other_key.params, other_key.passphrase),
            "nested/signer.key": agent_key_file(signer_key.params, signer_key.passphrase),
        },
    )


@pytest.fixture
def legacy_home(override_settings: Settings, temp_dir: Path, signer_key: GeneratedKey) -> Path:
    """Pre-2.1 GnuPG home with only secring.gpg."""
    return make_gnupg_home(temp_dir, secring=signer_key.secret_block)
