"""S-expression reader and canonical writer for gpg-agent key files.

Atoms are ``bytes`` and lists are Python ``list`` objects. Both the
canonical (length-prefixed) encoding and the advanced (human readable)
encoding used inside extended key files are understood.
"""

from __future__ import annotations

import base64
import binascii
import re
from typing import Union

SExpression = Union[bytes, list["SExpression"]]

_TOKEN_CHARS = frozenset(
    b"abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789-./_:*+="
)
_WHITESPACE = frozenset(b" \t\r\n\f\v")
_ESCAPES = {
    ord("b"): b"\b",
    ord("t"): b"\t",
    ord("v"): b"\v",
    ord("n"): b"\n",
    ord("f"): b"\f",
    ord("r"): b"\r",
    ord('"'): b'"',
    ord("'"): b"'",
    ord("\\"): b"\\",
}
_NAME_VALUE_LINE = re.compile(rb"^([A-Za-z][A-Za-z0-9_-]*):(.*)$")


class SExpressionError(ValueError):
    """Raised on malformed S-expression input."""


def _read_length(data: bytes, pos: int) -> tuple[int, int]:
    start = pos
    while pos < len(data) and 0x30 <= data[pos] <= 0x39:
        pos += 1
    if pos == start or len(data[start:pos]) > 9:
        raise SExpressionError(f"invalid length prefix at offset {start}")
    if data[start] == 0x30 and pos - start > 1:
        raise SExpressionError(f"length prefix with leading zero at offset {start}")
    return int(data[start:pos]), pos


def _read_verbatim(data: bytes, pos: int) -> tuple[bytes, int]:
    length, pos = _read_length(data, pos)
    if pos >= len(data) or data[pos] != 0x3A:
        raise SExpressionError(f"expected ':' at offset {pos}")
    pos += 1
    if pos + length > len(data):
        raise SExpressionError("atom runs past end of input")
    return bytes(data[pos : pos + length]), pos + length


def parse_canonical(data: bytes, *, allow_trailing: bool = False) -> list[SExpression]:
    """Parse a canonical S-expression that must start with ``(``.

    Args:
        data: Encoded expression
        allow_trailing: Ignore bytes after the closing parenthesis (used for
            decrypted payloads that carry block padding)
    """
    if not data or data[0] != 0x28:
        raise SExpressionError("canonical S-expression must start with '('")
    stack: list[list[SExpression]] = []
    pos = 0
    while pos < len(data):
        octet = data[pos]
        if octet == 0x28:
            stack.append([])
            pos += 1
        elif octet == 0x29:
            if not stack:
                raise SExpressionError(f"unbalanced ')' at offset {pos}")
            done = stack.pop()
            pos += 1
            if not stack:
                if pos != len(data) and not allow_trailing:
                    raise SExpressionError("trailing data after S-expression")
                return done
            stack[-1].append(done)
        elif octet == 0x5B:
            # Display hints are dropped.
            _, pos = _read_verbatim(data, pos + 1)
            if pos >= len(data) or data[pos] != 0x5D:
                raise SExpressionError(f"unterminated display hint at offset {pos}")
            pos += 1
        else:
            if not stack:
                raise SExpressionError(f"atom outside of list at offset {pos}")
            atom, pos = _read_verbatim(data, pos)
            stack[-1].append(atom)
    raise SExpressionError("unterminated S-expression")


def _read_quoted(data: bytes, pos: int) -> tuple[bytes, int]:
    out = bytearray()
    pos += 1
    while pos < len(data):
        octet = data[pos]
        if octet == 0x22:
            return bytes(out), pos + 1
        if octet != 0x5C:
            out.append(octet)
            pos += 1
            continue
        pos += 1
        if pos >= len(data):
            break
        escape = data[pos]
        if escape in _ESCAPES:
            out += _ESCAPES[escape]
            pos += 1
        elif escape == ord("x"):
            try:
                out.append(int(data[pos + 1 : pos + 3], 16))
            except ValueError as exc:
                raise SExpressionError(f"bad hex escape at offset {pos}") from exc
            pos += 3
        elif 0x30 <= escape <= 0x37:
            try:
                out.append(int(data[pos : pos + 3], 8))
            except ValueError as exc:
                raise SExpressionError(f"bad octal escape at offset {pos}") from exc
            pos += 3
        elif escape in (0x0A, 0x0D):
            # Line continuation.
            pos += 1
            if pos < len(data) and data[pos] in (0x0A, 0x0D) and data[pos] != escape:
                pos += 1
        else:
            raise SExpressionError(f"unknown escape at offset {pos}")
    raise SExpressionError("unterminated quoted string")


def _read_delimited(data: bytes, pos: int, delimiter: int) -> tuple[bytes, int]:
    end = data.find(bytes([delimiter]), pos + 1)
    if end < 0:
        raise SExpressionError(f"unterminated literal at offset {pos}")
    text = bytes(b for b in data[pos + 1 : end] if b not in _WHITESPACE)
    try:
        if delimiter == 0x23:
            value = binascii.unhexlify(text)
        else:
            value = base64.b64decode(text, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise SExpressionError(f"bad encoded literal at offset {pos}") from exc
    return value, end + 1


def parse_advanced(data: bytes) -> list[SExpression]:
    """Parse the advanced (transport/human readable) S-expression syntax."""
    stack: list[list[SExpression]] = []
    pos = 0
    while pos < len(data):
        octet = data[pos]
        if octet in _WHITESPACE:
            pos += 1
            continue
        if octet == 0x28:
            stack.append([])
            pos += 1
            continue
        if octet == 0x29:
            if not stack:
                raise SExpressionError(f"unbalanced ')' at offset {pos}")
            done = stack.pop()
            pos += 1
            if not stack:
                if data[pos:].strip():
                    raise SExpressionError("trailing data after S-expression")
                return done
            stack[-1].append(done)
            continue
        if not stack:
            raise SExpressionError(f"atom outside of list at offset {pos}")
        if octet == 0x22:
            atom, pos = _read_quoted(data, pos)
        elif octet in (0x23, 0x7C):
            atom, pos = _read_delimited(data, pos, octet)
        elif 0x30 <= octet <= 0x39 and re.match(rb"\d+:", data[pos : pos + 11]):
            atom, pos = _read_verbatim(data, pos)
        elif octet in _TOKEN_CHARS:
            start = pos
            while pos < len(data) and data[pos] in _TOKEN_CHARS:
                pos += 1
            atom = bytes(data[start:pos])
        else:
            raise SExpressionError(f"unexpected character 0x{octet:02x} at offset {pos}")
        stack[-1].append(atom)
    raise SExpressionError("unterminated S-expression")


def _extract_key_item(data: bytes) -> bytes:
    """Return the value of the ``Key:`` item of an extended key file."""
    collected: list[bytes] | None = None
    for line in data.splitlines():
        if line[:1] in (b" ", b"\t"):
            if collected is not None:
                collected.append(line.strip())
            continue
        if collected is not None:
            break
        if not line.strip() or line.startswith(b"#"):
            continue
        match = _NAME_VALUE_LINE.match(line)
        if match is None:
            raise SExpressionError("malformed name-value line in key file")
        if match.group(1).lower() == b"key":
            collected = [match.group(2).strip()]
    if collected is None:
        raise SExpressionError("extended key file has no Key item")
    return b" ".join(collected)


def load_key_expression(data: bytes) -> list[SExpression]:
    """Parse a private-keys-v1.d file in canonical or extended format."""
    if data.startswith(b"("):
        if data[1:2].isdigit():
            return parse_canonical(data)
        return parse_advanced(data)
    return parse_advanced(_extract_key_item(data))


def dump_canonical(expression: SExpression) -> bytes:
    """Encode ``expression`` in canonical form."""
    if isinstance(expression, (bytes, bytearray)):
        return str(len(expression)).encode("ascii") + b":" + bytes(expression)
    return b"(" + b"".join(dump_canonical(item) for item in expression) + b")"


def find_list(expression: list[SExpression], name: bytes) -> list[SExpression] | None:
    """Return the first direct sub-list whose first atom is ``name``."""
    for item in expression:
        if isinstance(item, list) and item and item[0] == name:
            return item
    return None


def atom_value(expression: list[SExpression], name: bytes) -> bytes | None:
    """Return the atom following ``name`` in the sub-list ``(name value)``."""
    found = find_list(expression, name)
    if found is None or len(found) < 2 or not isinstance(found[1], bytes):
        return None
    return found[1]
