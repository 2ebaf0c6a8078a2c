"""
Environment-driven signing options.

Priority: explicit overrides > environment variables > SignOptions defaults.
"""

from __future__ import annotations

__all__ = ["options_from_env"]

import logging
import os

from .constants import ENV_PASSPHRASE, ENV_STRICT_PARSING
from .core.signing import SignOptions, resolve_options

_logger = logging.getLogger(__name__)

_TRUE_VALUES = frozenset(("1", "true", "yes", "on"))
_FALSE_VALUES = frozenset(("0", "false", "no", "off"))


def _env_bool(name: str) -> bool | None:
    raw = os.environ.get(name, "").strip().lower()
    if not raw:
        return None
    if raw in _TRUE_VALUES:
        return True
    if raw in _FALSE_VALUES:
        return False
    _logger.warning("Invalid %s value %r, using default", name, raw)
    return None


def options_from_env(**overrides: object) -> SignOptions:
    """Build SignOptions from ``SIGNPDF_*`` environment variables.

    Keyword arguments (same names as the SignOptions fields) win over
    the environment.
    """
    env: dict[str, object] = {}

    passphrase = os.environ.get(ENV_PASSPHRASE)
    if passphrase:
        env["passphrase"] = passphrase

    strict = _env_bool(ENV_STRICT_PARSING)
    if strict is not None:
        env["strict_parsing"] = strict

    return resolve_options(None, {**env, **overrides})
