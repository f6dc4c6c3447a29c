"""Helpers for scoping secret byte buffers."""

from __future__ import annotations


def to_secret_buffer(value: str | bytes | bytearray | None) -> bytearray | None:
    """Copy ``value`` into a mutable buffer that can be wiped later.

    Strings are encoded as UTF-8. ``None`` passes through unchanged.
    """
    if value is None:
        return None
    if isinstance(value, str):
        return bytearray(value.encode("utf-8"))
    return bytearray(value)


def wipe(buffer: bytearray | None) -> None:
    """Overwrite ``buffer`` in place with zero bytes."""
    if buffer is None:
        return
    for index in range(len(buffer)):
        buffer[index] = 0

