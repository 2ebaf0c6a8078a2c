"""Tests for signpdf.core.pdf.byterange -- placeholder location and rewriting."""

from __future__ import annotations

import re

import pytest

from signpdf.core.pdf import (
    ByteRange,
    byte_range_placeholder,
    compute_byterange,
    locate_placeholder,
    remove_placeholder,
    remove_trailing_newline,
    rewrite_byterange,
)
from signpdf.constants import DEFAULT_BYTE_RANGE_PLACEHOLDER
from signpdf.errors import ParseError

from .conftest import make_placeholder_pdf

PLACEHOLDER = DEFAULT_BYTE_RANGE_PLACEHOLDER

# ── byte_range_placeholder ──────────────────────────────────────────


def test_byte_range_placeholder_text():
    assert byte_range_placeholder(PLACEHOLDER) == (
        "/ByteRange [0 /********** /********** /**********]"
    )


# ── remove_trailing_newline ─────────────────────────────────────────


@pytest.mark.parametrize(
    "tail",
    [b"%%EOF", b"%%EOF\n", b"%%EOF\r\n"],
    ids=["none", "lf", "crlf"],
)
def test_remove_trailing_newline(tail):
    assert remove_trailing_newline(b"%PDF-1.4\n" + tail) == b"%PDF-1.4\n%%EOF"


def test_remove_trailing_newline_only_one():
    with pytest.raises(ParseError, match="must end with an EOF line"):
        remove_trailing_newline(b"%PDF-1.4\n%%EOF\n\n")


def test_remove_trailing_newline_no_eof():
    with pytest.raises(ParseError, match="must end with an EOF line"):
        remove_trailing_newline(b"%PDF-1.4\nno trailer\n")


# ── locate_placeholder ──────────────────────────────────────────────


def test_locate_placeholder_offsets():
    pdf = make_placeholder_pdf(hex_len=16)
    loc = locate_placeholder(pdf, PLACEHOLDER)

    assert pdf[loc.byte_range_pos :].startswith(loc.byte_range_string.encode())
    assert pdf[loc.placeholder_pos : loc.placeholder_pos + 1] == b"<"
    assert pdf[loc.placeholder_pos + loc.placeholder_width - 1] == ord(">")
    assert loc.placeholder_width == 18
    assert loc.placeholder_length == 16
    assert loc.byte_range_end == loc.byte_range_pos + len(loc.byte_range_string)


def test_locate_placeholder_missing():
    expected = byte_range_placeholder(PLACEHOLDER)
    with pytest.raises(ParseError, match=re.escape(expected)):
        locate_placeholder(b"%PDF-1.4\n/ByteRange [0 0 0 0]\n%%EOF", PLACEHOLDER)


def test_locate_placeholder_custom_sentinel():
    pdf = make_placeholder_pdf(placeholder="__________")
    loc = locate_placeholder(pdf, "__________")
    assert loc.byte_range_string == "/ByteRange [0 /__________ /__________ /__________]"

    with pytest.raises(ParseError):
        locate_placeholder(pdf, PLACEHOLDER)


def test_locate_placeholder_no_contents():
    pdf = b"%PDF-1.4\n" + byte_range_placeholder(PLACEHOLDER).encode() + b"\n%%EOF"
    with pytest.raises(ParseError, match="/Contents"):
        locate_placeholder(pdf, PLACEHOLDER)


def test_locate_placeholder_contents_before_byterange_ignored():
    """Only a /Contents tag after the ByteRange counts."""
    pdf = (
        b"%PDF-1.4\n/Contents <0000>\n"
        + byte_range_placeholder(PLACEHOLDER).encode()
        + b"\n%%EOF"
    )
    with pytest.raises(ParseError, match="/Contents"):
        locate_placeholder(pdf, PLACEHOLDER)


def test_locate_placeholder_unclosed_hex():
    pdf = b"%PDF-1.4\n" + byte_range_placeholder(PLACEHOLDER).encode() + b" /Contents <0000"
    with pytest.raises(ParseError, match="'>'"):
        locate_placeholder(pdf, PLACEHOLDER)


# ── compute_byterange ───────────────────────────────────────────────


def test_compute_byterange_spans():
    pdf = make_placeholder_pdf(hex_len=32)
    loc = locate_placeholder(pdf, PLACEHOLDER)
    br = compute_byterange(loc, len(pdf))

    assert br.start0 == 0
    assert br.len0 == loc.placeholder_pos
    assert br.start1 == loc.placeholder_pos + loc.placeholder_width
    assert br.len0 + br.len1 + loc.placeholder_width == len(pdf)


def test_byterange_to_pdf():
    assert ByteRange(0, 10, 30, 5).to_pdf() == "/ByteRange [0 10 30 5]"


# ── rewrite_byterange ───────────────────────────────────────────────


def test_rewrite_byterange_preserves_length():
    pdf = make_placeholder_pdf(hex_len=16)
    loc = locate_placeholder(pdf, PLACEHOLDER)
    br = compute_byterange(loc, len(pdf))

    rewritten = rewrite_byterange(pdf, loc, br)

    assert len(rewritten) == len(pdf)
    region = rewritten[loc.byte_range_pos : loc.byte_range_end].decode()
    assert region.startswith(br.to_pdf())
    assert region[len(br.to_pdf()) :].strip() == ""
    # Everything outside the ByteRange text is untouched
    assert rewritten[: loc.byte_range_pos] == pdf[: loc.byte_range_pos]
    assert rewritten[loc.byte_range_end :] == pdf[loc.byte_range_end :]


def test_rewrite_byterange_too_wide():
    pdf = make_placeholder_pdf(placeholder="*")
    loc = locate_placeholder(pdf, "*")
    with pytest.raises(ParseError, match="does not fit"):
        rewrite_byterange(pdf, loc, ByteRange(0, 123456, 1234567, 12345))


# ── remove_placeholder ──────────────────────────────────────────────


def test_remove_placeholder_excises_field():
    pdf = make_placeholder_pdf(hex_len=16)
    loc = locate_placeholder(pdf, PLACEHOLDER)
    br = compute_byterange(loc, len(pdf))

    content = remove_placeholder(pdf, br)

    assert len(content) == len(pdf) - loc.placeholder_width
    assert b"<" + b"0" * 16 + b">" not in content
    assert content == pdf[: br.len0] + pdf[br.start1 :]
