"""Placeholder location and ByteRange rewriting.

The signing pipeline never changes the width of anything it rewrites:
the real ByteRange is padded to the placeholder's width, so every
offset computed before signing stays valid in the final document.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import NamedTuple

from ...constants import PDF_EOF_MARKER
from ...errors import ParseError

_logger = logging.getLogger(__name__)

_CONTENTS_TAG = b"/Contents "


class ByteRange(NamedTuple):
    """The two signed spans: ``[start0, len0, start1, len1]``."""

    start0: int
    len0: int
    start1: int
    len1: int

    def to_pdf(self) -> str:
        return f"/ByteRange [{self.start0} {self.len0} {self.start1} {self.len1}]"


@dataclass(frozen=True)
class PlaceholderLocation:
    """Offsets of the reserved signature field inside one document buffer.

    Attributes:
        byte_range_pos: Offset of the ``/ByteRange [...]`` placeholder text.
        byte_range_string: The exact placeholder text that was found.
        placeholder_pos: Offset of the ``<`` opening the hex field.
        placeholder_width: Width of the hex field including both brackets.
    """

    byte_range_pos: int
    byte_range_string: str
    placeholder_pos: int
    placeholder_width: int

    @property
    def byte_range_end(self) -> int:
        return self.byte_range_pos + len(self.byte_range_string)

    @property
    def placeholder_length(self) -> int:
        """Hex-character capacity of the field (brackets excluded)."""
        return self.placeholder_width - 2


def byte_range_placeholder(placeholder: str) -> str:
    """Build the literal ``/ByteRange`` text a prepared document must contain.

    >>> byte_range_placeholder("**")
    '/ByteRange [0 /** /** /**]'
    """
    return f"/ByteRange [0 /{placeholder} /{placeholder} /{placeholder}]"


def remove_trailing_newline(pdf_bytes: bytes) -> bytes:
    """Drop one trailing EOL and require the buffer to end with ``%%EOF``."""
    output = pdf_bytes
    if output.endswith(b"\r\n"):
        output = output[:-2]
    elif output.endswith(b"\n"):
        output = output[:-1]
    if not output.endswith(PDF_EOF_MARKER):
        raise ParseError("A PDF file must end with an EOF line.")
    return output


def locate_placeholder(pdf_bytes: bytes, placeholder: str) -> PlaceholderLocation:
    """Find the ByteRange placeholder and the hex signature field after it.

    Raises:
        ParseError: If the placeholder text, the ``/Contents`` tag, or
            either bracket of the hex field is missing.
    """
    byte_range_string = byte_range_placeholder(placeholder)
    byte_range_pos = pdf_bytes.find(byte_range_string.encode("latin-1"))
    if byte_range_pos == -1:
        raise ParseError(f"Could not find ByteRange placeholder: {byte_range_string}")

    byte_range_end = byte_range_pos + len(byte_range_string)
    contents_tag_pos = pdf_bytes.find(_CONTENTS_TAG, byte_range_end)
    if contents_tag_pos == -1:
        raise ParseError("Could not find /Contents after the ByteRange placeholder.")
    placeholder_pos = pdf_bytes.find(b"<", contents_tag_pos)
    if placeholder_pos == -1:
        raise ParseError("Could not find '<' opening the /Contents placeholder.")
    placeholder_end = pdf_bytes.find(b">", placeholder_pos)
    if placeholder_end == -1:
        raise ParseError("Could not find '>' closing the /Contents placeholder.")

    location = PlaceholderLocation(
        byte_range_pos=byte_range_pos,
        byte_range_string=byte_range_string,
        placeholder_pos=placeholder_pos,
        placeholder_width=placeholder_end + 1 - placeholder_pos,
    )
    _logger.debug(
        "Placeholder found: ByteRange at %d, Contents at %d (%d hex chars)",
        location.byte_range_pos,
        location.placeholder_pos,
        location.placeholder_length,
    )
    return location


def compute_byterange(location: PlaceholderLocation, document_length: int) -> ByteRange:
    """Compute the real ByteRange around the reserved hex field."""
    start1 = location.placeholder_pos + location.placeholder_width
    return ByteRange(0, location.placeholder_pos, start1, document_length - start1)


def rewrite_byterange(
    pdf_bytes: bytes, location: PlaceholderLocation, byte_range: ByteRange
) -> bytes:
    """Replace the placeholder text with the real ByteRange, same width.

    Raises:
        ParseError: If the real ByteRange does not fit the placeholder text.
    """
    width = len(location.byte_range_string)
    actual = byte_range.to_pdf()
    if len(actual) > width:
        raise ParseError(
            f"ByteRange {actual} does not fit the {width}-character placeholder "
            f"{location.byte_range_string}"
        )
    actual = actual.ljust(width)
    return (
        pdf_bytes[: location.byte_range_pos]
        + actual.encode("latin-1")
        + pdf_bytes[location.byte_range_end :]
    )


def remove_placeholder(pdf_bytes: bytes, byte_range: ByteRange) -> bytes:
    """Excise the bracketed hex field, leaving exactly the bytes to sign."""
    return (
        pdf_bytes[: byte_range.len0]
        + pdf_bytes[byte_range.start1 : byte_range.start1 + byte_range.len1]
    )
