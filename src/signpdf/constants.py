"""
Package-wide constants for signpdf.

Placeholder sentinels, size defaults, and environment variable names
are centralized here.
"""

from __future__ import annotations

import importlib.metadata

try:
    __version__ = importlib.metadata.version("signpdf")
except importlib.metadata.PackageNotFoundError:
    __version__ = "0.3.0"

__all__ = [
    "DEFAULT_BYTE_RANGE_PLACEHOLDER",
    "DEFAULT_DIGEST_ALGORITHM",
    "DEFAULT_SIGNATURE_LENGTH",
    "ENV_PASSPHRASE",
    "ENV_STRICT_PARSING",
    "PDF_EOF_MARKER",
    "PDF_MAGIC",
    "__version__",
]

# ── Placeholder layout ────────────────────────────────────────────────

# Sentinel repeated three times inside "/ByteRange [0 /p /p /p]" to reserve
# enough columns for the real offsets.
DEFAULT_BYTE_RANGE_PLACEHOLDER = "**********"

# Bytes reserved for the DER signature by add_placeholder().
# Hex capacity in /Contents is twice this.
DEFAULT_SIGNATURE_LENGTH = 8192


# ── Signature defaults ──────────────────────────────────────────────

# adbe.pkcs7.detached consumers expect SHA-256
DEFAULT_DIGEST_ALGORITHM = "sha256"


# ── Document markers ─────────────────────────────────────────────────

PDF_MAGIC = b"%PDF-"
PDF_EOF_MARKER = b"%%EOF"


# ── Environment variable names ──────────────────────────────────────

ENV_PASSPHRASE = "SIGNPDF_PASSPHRASE"
ENV_STRICT_PARSING = "SIGNPDF_STRICT_PARSING"
