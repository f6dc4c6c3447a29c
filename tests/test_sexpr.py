"""Tests for S-expression parsing of agent key files."""

from __future__ import annotations

import pytest

import gnupg_fixtures
from commitsign.openpgp.sexpr import (
    SExpressionError,
    atom_value,
    dump_canonical,
    find_list,
    load_key_expression,
    parse_advanced,
    parse_canonical,
)


def test_canonical_parse_and_dump() -> None:
    data = b"(3:foo(3:bar2:\x00\x01)(1:x))"

    parsed = parse_canonical(data)

    assert parsed == [b"foo", [b"bar", b"\x00\x01"], [b"x"]]
    assert dump_canonical(parsed) == data


def test_canonical_display_hints_are_dropped() -> None:
    assert parse_canonical(b"(4:name[10:text/plain]5:value)") == [b"name", b"value"]


def test_canonical_trailing_data() -> None:
    with pytest.raises(SExpressionError, match="trailing"):
        parse_canonical(b"(1:a)junk")

    assert parse_canonical(bytearray(b"(1:a)\x00\x00\x00"), allow_trailing=True) == [b"a"]


@pytest.mark.parametrize(
    "data",
    [b"", b"1:a", b"(1:a", b"(5:ab)", b"(1:a))", b"(x:a)"],
)
def test_canonical_malformed(data: bytes) -> None:
    with pytest.raises(SExpressionError):
        parse_canonical(data)


def test_advanced_syntax() -> None:
    data = b'(key (name "a \\"quoted\\" \\x41") (hex #0102 03#) (b64 |AQID|) (raw 3:x y))'

    parsed = parse_advanced(data)

    assert parsed == [
        b"key",
        [b"name", b'a "quoted" A'],
        [b"hex", b"\x01\x02\x03"],
        [b"b64", b"\x01\x02\x03"],
        [b"raw", b"x y"],
    ]


def test_advanced_rejects_garbage() -> None:
    with pytest.raises(SExpressionError):
        parse_advanced(b"(key {brace})")
    with pytest.raises(SExpressionError):
        parse_advanced(b"(key #zz#)")


def test_fixture_agent_key_structure() -> None:
    expression = load_key_expression(gnupg_fixtures.VALID_AGENT_KEY)

    assert expression[0] == b"protected-private-key"
    body = expression[1]
    assert body[0] == b"rsa"
    assert len(atom_value(body, b"n")) == 257
    assert atom_value(body, b"e") == b"\x01\x00\x01"
    protected = find_list(body, b"protected")
    assert protected[1] == b"openpgp-s2k3-sha1-aes-cbc"
    assert atom_value(body, b"protected-at") == b"20181113T202236"
    assert find_list(body, b"missing") is None


def test_extended_format_key_item() -> None:
    data = (
        b"Created: 20240101T120000\n"
        b"# comment\n"
        b"Key: (private-key (rsa (n #00C1#)\n"
        b"  (e #010001#)))\n"
        b"Label: continued\n"
        b"  label text\n"
    )

    expression = load_key_expression(data)

    assert expression == [b"private-key", [b"rsa", [b"n", b"\x00\xc1"], [b"e", b"\x01\x00\x01"]]]


def test_extended_format_without_key_item() -> None:
    with pytest.raises(SExpressionError, match="no Key item"):
        load_key_expression(b"Created: 20240101T120000\n")
