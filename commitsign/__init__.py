"""commitsign - OpenPGP commit signing backed by GnuPG key stores.

Locates secret keys across keybox, agent key directory and legacy keyring
layouts, unlocks them with bounded passphrase retries and produces detached
signatures suitable for embedding in commit headers.
"""

__version__ = "0.1.0"
__author__ = "commitsign contributors"

from commitsign.config import Settings, get_settings

__all__ = ["Settings", "get_settings", "__version__"]
