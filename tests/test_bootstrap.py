from pydantic import SecretStr

from commitsign.app.adapters import StaticCredentialAdapter, TerminalCredentialAdapter
from commitsign.bootstrap import bootstrap_application

RESOURCE = "secring.gpg#A5FEE80C60FFA4D9"


def test_close_wipes_configured_passphrase(override_settings):
    override_settings.passphrase = SecretStr("JGitAuth1")
    container = bootstrap_application(override_settings)

    assert isinstance(container.credentials, StaticCredentialAdapter)
    assert container.credentials.get_password(RESOURCE, "prompt") == bytearray(b"JGitAuth1")
    container.close()
    assert container.credentials.get_password(RESOURCE, "prompt") is None


def test_close_leaves_supplied_credentials(override_settings):
    credentials = StaticCredentialAdapter("JGitAuth1")
    container = bootstrap_application(override_settings, credentials=credentials)

    container.close()

    assert credentials.get_password(RESOURCE, "prompt") == bytearray(b"JGitAuth1")


def test_terminal_credentials_without_passphrase(override_settings):
    override_settings.passphrase = None
    container = bootstrap_application(override_settings)

    assert isinstance(container.credentials, TerminalCredentialAdapter)
    container.close()
