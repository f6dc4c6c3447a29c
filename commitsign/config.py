"""Configuration management with Pydantic settings and GnuPG home discovery."""

import os
from pathlib import Path

from pydantic import AliasChoices, Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_KEY_ALIAS = "default"


def get_default_gnupg_home() -> Path:
    """Get GNUPGHOME, defaulting to ~/.gnupg."""
    gnupg_home = os.getenv("GNUPGHOME")
    if gnupg_home:
        return Path(gnupg_home)
    return Path.home() / ".gnupg"


class Settings(BaseSettings):
    """commitsign configuration settings.

    Precedence: CLI flag > environment variable > .env file > defaults.
    """

    model_config = SettingsConfigDict(
        env_prefix="COMMITSIGN_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    gnupg_home: Path | None = Field(
        default=None,
        validation_alias=AliasChoices("gnupg_home", "COMMITSIGN_GNUPG_HOME", "GNUPGHOME"),
        description="GnuPG home directory (defaults to GNUPGHOME or ~/.gnupg)",
    )

    secret_key_path: Path | None = Field(
        default=None,
        description="Explicit legacy secret keyring to sign with, bypassing the keybox",
    )

    signing_key: str | None = Field(
        default=None,
        description="Key identifier used when signing with the 'default' key alias",
    )

    passphrase: SecretStr | None = Field(
        default=None,
        description="Passphrase for non-interactive signing (prompted when unset)",
    )

    passphrase_attempts: int = Field(
        default=1,
        ge=1,
        description="Number of passphrase prompts before a key is given up on",
    )

    log_level: str = Field(
        default="WARNING",
        description="Root log level applied by the CLI",
    )

    @field_validator("signing_key")
    @classmethod
    def _normalize_signing_key(cls, value: str | None) -> str | None:
        if value is None:
            return None
        value = value.strip()
        return value or None

    def get_gnupg_home(self) -> Path:
        """Return the configured GnuPG home directory."""
        if self.gnupg_home is not None:
            return self.gnupg_home.expanduser()
        return get_default_gnupg_home()

    def get_keybox_path(self) -> Path:
        """Get path to the public keybox."""
        return self.get_gnupg_home() / "pubring.kbx"

    def get_secret_key_dir(self) -> Path:
        """Get path to the agent's private key directory."""
        return self.get_gnupg_home() / "private-keys-v1.d"

    def get_legacy_secret_keyring_path(self) -> Path:
        """Get path to the pre-2.1 combined secret keyring."""
        return self.get_gnupg_home() / "secring.gpg"

    def get_secret_key_override(self) -> Path | None:
        """Return the explicit secret keyring path, if one was configured."""
        if self.secret_key_path is None:
            return None
        return self.secret_key_path.expanduser()

    def get_passphrase(self) -> str | None:
        """Return the configured non-interactive passphrase."""
        if self.passphrase is None:
            return None
        return self.passphrase.get_secret_value()


# Global settings instance
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def set_settings(settings: Settings) -> None:
    """Set global settings instance (useful for testing)."""
    global _settings
    _settings = settings
