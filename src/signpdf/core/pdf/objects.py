"""Low-level PDF object construction.

Helpers for building the raw objects of a signature placeholder update:
the signature dictionary, the invisible widget annotation, and overrides
of existing page and catalog objects.

Structure analysis and incremental update assembly is in incremental.py.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import TYPE_CHECKING

from ...constants import __version__
from .. import require_pikepdf as _require_pikepdf
from .byterange import byte_range_placeholder

if TYPE_CHECKING:
    import pikepdf

_logger = logging.getLogger(__name__)

# PDF annotation flags for signature widget (/F entry).
# Print flag is 4, Locked flag is 128; combined value is 132.
# See PDF Reference 1.7, Table 165 -- Annotation flags.
_ANNOT_FLAG_PRINT = 4
_ANNOT_FLAG_LOCKED = 128
ANNOT_FLAGS_SIG_WIDGET = _ANNOT_FLAG_PRINT | _ANNOT_FLAG_LOCKED  # 132


# ── PDF string/object helpers ────────────────────────────────────────


def pdf_string(text: str) -> str:
    """Escape text for a PDF literal string.

    Handles backslash, parentheses, control characters, and non-Latin1
    characters (replaced with '?' since PDFDocEncoding has limited
    Unicode support).
    """
    result: list[str] = []
    replaced_count = 0
    for char in text:
        code = ord(char)
        if char == "\\":
            result.append("\\\\")
        elif char == "(":
            result.append("\\(")
        elif char == ")":
            result.append("\\)")
        elif char == "\n":
            result.append("\\n")
        elif char == "\r":
            result.append("\\r")
        elif char == "\t":
            result.append("\\t")
        elif code < 0x20 or code == 0x7F:
            result.append(f"\\{code:03o}")
        elif code > 0xFF:
            result.append("?")
            replaced_count += 1
        else:
            result.append(char)
    if replaced_count > 0:
        _logger.warning(
            "pdf_string: %d non-Latin1 character(s) replaced with '?' in: %r", replaced_count, text
        )
    return "".join(result)


def pdf_date(moment: datetime | None = None) -> str:
    """Format a PDF date string (``D:YYYYMMDDHHmmSS+00'00'``) in UTC."""
    moment = moment or datetime.now(timezone.utc)
    return moment.astimezone(timezone.utc).strftime("D:%Y%m%d%H%M%S+00'00'")


def _serialize_pikepdf_obj(obj: None | bool | int | float | pikepdf.Object) -> str:
    """Serialize a pikepdf object to raw PDF syntax.

    Indirect references are emitted as "N G R"; plain Python types that
    pikepdf may return are handled explicitly.
    """
    if obj is None:
        return "null"
    if isinstance(obj, bool):
        return "true" if obj else "false"
    if isinstance(obj, int):
        return str(obj)
    if isinstance(obj, float):
        return str(int(obj)) if obj % 1 == 0.0 else f"{obj:.6f}"
    pikepdf = _require_pikepdf()
    if isinstance(obj, pikepdf.Object) and obj.is_indirect:
        return f"{obj.objgen[0]} {obj.objgen[1]} R"
    return obj.unparse(resolved=True).decode("latin-1")


# ── Object override builders ─────────────────────────────────────────


def build_object_override(
    pdf: pikepdf.Pdf,
    obj_num: int,
    obj_gen: int,
    skip_key: str,
    new_entry: str,
) -> str:
    """Build a raw override of an existing dictionary object.

    Copies every entry except *skip_key* and appends *new_entry*.

    Args:
        pdf: The open source document.
        obj_num: Target object number.
        obj_gen: Target generation number.
        skip_key: Key to omit from the original object (e.g., "/Annots").
        new_entry: New entry to append (e.g., "  /Annots [5 0 R]").

    Returns:
        str -- Raw PDF object definition.
    """
    obj = pdf.get_object((obj_num, obj_gen))
    # pikepdf dict requires .keys() -- __iter__ yields values, not keys
    entries = [
        f"  {key} {_serialize_pikepdf_obj(obj[key])}" for key in list(obj.keys()) if key != skip_key
    ]
    entries.append(new_entry)
    body = "\n".join(entries)
    return f"{obj_num} {obj_gen} obj\n<<\n{body}\n>>\nendobj\n"


def build_page_override(pdf: pikepdf.Pdf, page_ref: tuple[int, int], annots: list[str]) -> str:
    """Override the page object with the widget added to /Annots."""
    return build_object_override(
        pdf, page_ref[0], page_ref[1], skip_key="/Annots", new_entry=f"  /Annots [{' '.join(annots)}]"
    )


def build_catalog_override(pdf: pikepdf.Pdf, root_ref: tuple[int, int], fields: list[str]) -> str:
    """Override the catalog with an /AcroForm listing the signature field."""
    return build_object_override(
        pdf,
        root_ref[0],
        root_ref[1],
        skip_key="/AcroForm",
        new_entry=f"  /AcroForm << /Fields [{' '.join(fields)}] /SigFlags 3 >>",
    )


# ── Signature objects ────────────────────────────────────────────────


def build_sig_dict(
    obj_num: int,
    placeholder: str,
    signature_length: int,
    reason: str,
    name: str | None = None,
    location: str | None = None,
    contact_info: str | None = None,
) -> str:
    """Build the /Type /Sig dictionary holding both placeholders.

    /ByteRange must come before /Contents: the signer looks for the
    hex field after the ByteRange placeholder.
    """
    contents_zeros = "0" * (signature_length * 2)
    optional = ""
    if name:
        optional += f"  /Name ({pdf_string(name)})\n"
    if location:
        optional += f"  /Location ({pdf_string(location)})\n"
    if contact_info:
        optional += f"  /ContactInfo ({pdf_string(contact_info)})\n"
    return (
        f"{obj_num} 0 obj\n"
        f"<<\n"
        f"  /Type /Sig\n"
        f"  /Filter /Adobe.PPKLite\n"
        f"  /SubFilter /adbe.pkcs7.detached\n"
        f"  {byte_range_placeholder(placeholder)}\n"
        f"  /Contents <{contents_zeros}>\n"
        f"  /M ({pdf_date()})\n"
        f"  /Reason ({pdf_string(reason)})\n"
        f"{optional}"
        f"  /Prop_Build << /App << /Name /signpdf /REx ({__version__}) >> "
        f"/Filter << /Name /Adobe.PPKLite >> >>\n"
        f">>\n"
        f"endobj\n"
    )


def build_invisible_widget(sig_obj_num: int, annot_obj_num: int, page_ref: tuple[int, int]) -> str:
    """Build an invisible signature widget (/Rect [0 0 0 0], no /AP)."""
    return (
        f"{annot_obj_num} 0 obj\n"
        f"<<\n"
        f"  /Type /Annot\n"
        f"  /Subtype /Widget\n"
        f"  /FT /Sig\n"
        f"  /Rect [0 0 0 0]\n"
        f"  /V {sig_obj_num} 0 R\n"
        f"  /T (Signature{annot_obj_num})\n"
        f"  /F {ANNOT_FLAGS_SIG_WIDGET}\n"
        f"  /P {page_ref[0]} {page_ref[1]} R\n"
        f"  /Border [0 0 0]\n"
        f">>\n"
        f"endobj\n"
    )
