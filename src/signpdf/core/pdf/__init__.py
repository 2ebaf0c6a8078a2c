"""PDF placeholder handling, signature embedding, extraction and verification."""

from .byterange import (
    ByteRange,
    PlaceholderLocation,
    byte_range_placeholder,
    compute_byterange,
    locate_placeholder,
    remove_placeholder,
    remove_trailing_newline,
    rewrite_byterange,
)
from .cms_extraction import (
    BYTERANGE_PATTERN,
    extract_signature,
    extract_signature_data,
    find_byteranges,
)
from .embed import embed_signature, pad_signature_hex
from .placeholder import add_placeholder
from .verify import (
    GENERIC_FAILURE,
    WRONG_AUTHENTICATED_ATTRIBUTES,
    WRONG_CONTENT_DIGEST,
    VerificationResult,
    verify_signature,
)

__all__ = [
    "BYTERANGE_PATTERN",
    "GENERIC_FAILURE",
    "WRONG_AUTHENTICATED_ATTRIBUTES",
    "WRONG_CONTENT_DIGEST",
    "ByteRange",
    "PlaceholderLocation",
    "VerificationResult",
    "add_placeholder",
    "byte_range_placeholder",
    "compute_byterange",
    "embed_signature",
    "extract_signature",
    "extract_signature_data",
    "find_byteranges",
    "locate_placeholder",
    "pad_signature_hex",
    "remove_placeholder",
    "remove_trailing_newline",
    "rewrite_byterange",
    "verify_signature",
]
