"""OpenPGP container formats used by GnuPG key stores."""
