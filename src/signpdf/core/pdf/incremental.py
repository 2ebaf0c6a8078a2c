"""PDF structure analysis and incremental update assembly.

Reads the existing structure (catalog, page, xref offsets, trailer
entries) and appends new objects after the original ``%%EOF`` with
their own xref section, leaving the original bytes untouched.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from ...errors import InputError, ParseError

if TYPE_CHECKING:
    import pikepdf

# ── PDF structure analysis ───────────────────────────────────────────


def find_root_ref(pdf: pikepdf.Pdf) -> tuple[int, int]:
    """Return (num, gen) of the catalog referenced by the trailer."""
    root = pdf.trailer.get("/Root")
    if root is None or not root.is_indirect:
        raise ParseError("Cannot find an indirect /Root reference in the PDF trailer.")
    return root.objgen


def resolve_page_index(pdf: pikepdf.Pdf, page_selector: int | str) -> int:
    """Convert "first", "last", or a 0-based index into a validated index.

    Raises:
        InputError: On an unknown specifier or an out-of-range index.
    """
    total = len(pdf.pages)
    if isinstance(page_selector, str):
        selector = page_selector.strip().lower()
        if selector == "last":
            return total - 1
        if selector == "first":
            return 0
        try:
            page_selector = int(selector)
        except ValueError as exc:
            raise InputError(
                f"Invalid page: {page_selector!r}. Use 'first', 'last', or a 0-based number."
            ) from exc

    idx = int(page_selector)
    if idx < 0 or idx >= total:
        raise InputError(f"Page {idx} out of range (PDF has {total} page(s), 0-based).")
    return idx


def find_page(pdf: pikepdf.Pdf, page_selector: int | str) -> tuple[tuple[int, int], list[str]]:
    """Return the page's (num, gen) and its existing /Annots references."""
    page_obj = pdf.pages[resolve_page_index(pdf, page_selector)].obj
    if not page_obj.is_indirect:
        raise ParseError("Target page is not an indirect object.")
    existing_annots: list[str] = []
    if "/Annots" in page_obj:
        for ref in page_obj["/Annots"]:
            if ref.is_indirect:
                existing_annots.append(f"{ref.objgen[0]} {ref.objgen[1]} R")
    return page_obj.objgen, existing_annots


def find_existing_fields(pdf: pikepdf.Pdf) -> list[str]:
    """Return references of the form fields already listed in /AcroForm."""
    acroform = pdf.Root.get("/AcroForm")
    if acroform is None or "/Fields" not in acroform:
        return []
    return [f"{ref.objgen[0]} {ref.objgen[1]} R" for ref in acroform["/Fields"] if ref.is_indirect]


def find_prev_startxref(pdf_bytes: bytes, pdf: pikepdf.Pdf) -> tuple[int, int, list[str]]:
    """Find the last startxref offset, /Size, and trailer entries to carry forward.

    Returns:
        (prev_xref, size, trailer_extra) where trailer_extra holds raw
        trailer entries such as /Info and /ID.
    """
    # PDFs with incremental updates have multiple startxref/%%EOF pairs;
    # the last one is authoritative.
    matches = list(re.finditer(rb"startxref\s+(\d+)\s+%%EOF", pdf_bytes))
    if not matches:
        raise ParseError("Cannot find startxref in PDF.")
    prev_xref = int(matches[-1].group(1))

    # pikepdf resolves /Size across xref streams and hybrid files.
    try:
        size = int(pdf.trailer["/Size"])
    except KeyError as e:
        raise ParseError(f"Cannot determine /Size from PDF trailer: {e}") from e

    trailer_extra: list[str] = []
    trailer = pdf.trailer
    if "/Info" in trailer and trailer["/Info"].is_indirect:
        info = trailer["/Info"]
        trailer_extra.append(f"/Info {info.objgen[0]} {info.objgen[1]} R")
    if "/ID" in trailer:
        trailer_extra.append(f"/ID {trailer['/ID'].unparse(resolved=True).decode('latin-1')}")
    return prev_xref, size, trailer_extra


# ── Incremental update assembly ─────────────────────────────────────


def assemble_incremental_update(
    pdf_bytes: bytes,
    raw_objects: list[tuple[bytes, tuple[int, int]]],
    new_size: int,
    prev_xref: int,
    root_ref: tuple[int, int],
    trailer_extra: list[str],
) -> bytes:
    """Append *raw_objects*, an xref section, and a trailer to the document."""
    base = pdf_bytes
    if not base.endswith(b"\n"):
        base = base + b"\n"

    xref_entries: dict[int, tuple[int, int]] = {}
    running_offset = len(base)
    for raw_bytes, (obj_num, obj_gen) in raw_objects:
        xref_entries[obj_num] = (running_offset, obj_gen)
        running_offset += len(raw_bytes)

    all_objects = b"".join(raw for raw, _ in raw_objects)
    xref_data = build_xref_and_trailer(
        xref_entries=xref_entries,
        new_size=new_size,
        prev_xref=prev_xref,
        root_ref=root_ref,
        trailer_extra=trailer_extra,
        xref_offset=len(base) + len(all_objects),
    )
    return base + all_objects + xref_data


def build_xref_and_trailer(
    xref_entries: dict[int, tuple[int, int]],
    new_size: int,
    prev_xref: int,
    root_ref: tuple[int, int],
    trailer_extra: list[str],
    xref_offset: int,
) -> bytes:
    """Build an xref table and trailer for an incremental update.

    Args:
        xref_entries: Mapping of object number to (byte offset, generation).
        new_size: Total object count (/Size value).
        prev_xref: Previous xref offset (/Prev value).
        root_ref: Catalog (num, gen) for the /Root reference.
        trailer_extra: Extra trailer entries to carry forward (/Info, /ID).
        xref_offset: Byte offset where this xref table starts.

    Returns:
        Raw bytes of the xref table, trailer, and %%EOF.
    """
    if not xref_entries:
        raise ParseError("Cannot build xref table: no objects to reference.")

    # Group consecutive object numbers into subsections
    sorted_nums = sorted(xref_entries)
    groups: list[list[int]] = [[sorted_nums[0]]]
    for n in sorted_nums[1:]:
        if n == groups[-1][-1] + 1:
            groups[-1].append(n)
        else:
            groups.append([n])

    xref_lines = ["xref"]
    for group in groups:
        xref_lines.append(f"{group[0]} {len(group)}")
        # Each entry is exactly 20 bytes: 18 chars + "\r" + the joining "\n".
        xref_lines.extend(
            f"{xref_entries[n][0]:010d} {xref_entries[n][1]:05d} n\r" for n in group
        )

    xref_lines.append("trailer")
    xref_lines.append("<<")
    xref_lines.append(f"  /Size {new_size}")
    xref_lines.append(f"  /Prev {prev_xref}")
    xref_lines.append(f"  /Root {root_ref[0]} {root_ref[1]} R")
    xref_lines.extend(f"  {extra}" for extra in trailer_extra)
    xref_lines.append(">>")
    xref_lines.append("startxref")
    xref_lines.append(str(xref_offset))
    xref_lines.append("%%EOF")
    xref_lines.append("")

    return "\n".join(xref_lines).encode("latin-1")
