"""Signature placeholder preparation.

Adds an invisible, unsigned signature field to an existing PDF so that
:meth:`signpdf.SignPdf.sign` has a ``/ByteRange`` and ``/Contents``
placeholder to fill in.
"""

from __future__ import annotations

__all__ = ["add_placeholder"]

import io
import logging
import re

from ...constants import DEFAULT_BYTE_RANGE_PLACEHOLDER, DEFAULT_SIGNATURE_LENGTH, PDF_MAGIC
from ...errors import InputError, ParseError
from .. import ensure_bytes
from .. import require_pikepdf as _require_pikepdf
from .cms_extraction import BYTERANGE_PATTERN
from .incremental import (
    assemble_incremental_update,
    find_existing_fields,
    find_page,
    find_prev_startxref,
    find_root_ref,
)
from .objects import (
    build_catalog_override,
    build_invisible_widget,
    build_page_override,
    build_sig_dict,
)

_logger = logging.getLogger(__name__)


def add_placeholder(
    pdf_bytes: bytes,
    *,
    reason: str = "Signed with signpdf",
    name: str | None = None,
    location: str | None = None,
    contact_info: str | None = None,
    signature_length: int = DEFAULT_SIGNATURE_LENGTH,
    placeholder: str = DEFAULT_BYTE_RANGE_PLACEHOLDER,
    page: int | str = 0,
) -> bytes:
    """
    Append an invisible signature field with empty placeholders.

    Uses a true incremental update: the original bytes are preserved
    exactly and the new objects, xref section and trailer are appended
    after the original ``%%EOF``.

    Args:
        pdf_bytes: Raw PDF content.
        reason: /Reason of the signature dictionary.
        name: Optional signer display name (/Name).
        location: Optional /Location.
        contact_info: Optional /ContactInfo.
        signature_length: Bytes reserved for the DER signature.
        placeholder: ByteRange sentinel; must match the signer's.
        page: Page carrying the widget -- 0-based int, "first", or "last".

    Returns:
        The PDF with the placeholder field appended.

    Raises:
        InputError: On invalid arguments or an already signed document.
        ParseError: If the input is not a readable PDF.
    """
    pdf_bytes = ensure_bytes(pdf_bytes, "PDF expected as bytes.")
    if not pdf_bytes.startswith(PDF_MAGIC):
        raise ParseError("Input does not appear to be a PDF file.")
    if signature_length <= 0:
        raise InputError(f"Signature length must be positive, got {signature_length}")
    if not placeholder or any(c in placeholder for c in " /[]<>"):
        raise InputError(f"Invalid ByteRange placeholder: {placeholder!r}")
    if re.search(BYTERANGE_PATTERN, pdf_bytes):
        raise InputError("PDF already contains a signature; only one is supported.")

    pikepdf = _require_pikepdf()
    try:
        with pikepdf.open(io.BytesIO(pdf_bytes)) as pdf:
            root_ref = find_root_ref(pdf)
            page_ref, annots = find_page(pdf, page)
            prev_xref, size, trailer_extra = find_prev_startxref(pdf_bytes, pdf)
            fields = find_existing_fields(pdf)

            sig_num = size
            annot_num = size + 1
            widget_ref = f"{annot_num} 0 R"

            raw_objects = [
                (
                    build_sig_dict(
                        sig_num, placeholder, signature_length, reason, name, location, contact_info
                    ),
                    (sig_num, 0),
                ),
                (build_invisible_widget(sig_num, annot_num, page_ref), (annot_num, 0)),
                (build_page_override(pdf, page_ref, [*annots, widget_ref]), page_ref),
                (build_catalog_override(pdf, root_ref, [*fields, widget_ref]), root_ref),
            ]
    except pikepdf.PdfError as e:
        raise ParseError(f"Cannot read PDF structure: {e}") from e

    result = assemble_incremental_update(
        pdf_bytes=pdf_bytes,
        raw_objects=[(raw.encode("latin-1"), ref) for raw, ref in raw_objects],
        new_size=annot_num + 1,
        prev_xref=prev_xref,
        root_ref=root_ref,
        trailer_extra=trailer_extra,
    )
    _logger.debug(
        "Added signature placeholder: sig obj %d, widget obj %d, %d bytes reserved",
        sig_num,
        annot_num,
        signature_length,
    )
    return result
