"""Concrete adapters wiring application ports to GnuPG storage and terminals."""

from __future__ import annotations

from .credentials import StaticCredentialAdapter, TerminalCredentialAdapter
from .keystore import GnuPGKeyStoreAdapter

__all__ = [
    "GnuPGKeyStoreAdapter",
    "StaticCredentialAdapter",
    "TerminalCredentialAdapter",
]
