# utils.py
"""
Shared constants and small helpers for the hosts file editor.

This module provides:
- Default configuration values (timeouts, lookup endpoint, elevation command)
- Platform-aware location of the system hosts file
- Line classification helpers (comment / blank / mapping)
- Registrable domain (eTLD+1) extraction via tldextract

Example Usage:
    from hostsedit.utils import split_tokens, registrable_domain

    split_tokens("10.0.0.5   foo.example  bar.example")
    # Returns: ["10.0.0.5", "foo.example", "bar.example"]

    registrable_domain("api.example.co.uk")  # Returns: "example.co.uk"
"""

from __future__ import annotations

import logging
import os
import re
import sys
from functools import lru_cache
from pathlib import Path

import tldextract

logger = logging.getLogger(__name__)


# -------------------------
# Configuration defaults
# -------------------------

DEFAULT_TIMEOUT = 10  # seconds per lookup request
DEFAULT_LOOKUP_ENDPOINT: str | None = None
DEFAULT_ELEVATE_CMD = "sudo"
BACKUP_SUFFIX = ".bak"

DOMAIN_CACHE_SIZE = 32768
IO_BUFFER_SIZE = 131072  # 128KB buffer for file I/O

COMMENT_MARKER = "#"

_TOKEN_SPLIT_RE = re.compile(r"\s+")

# Bundled public suffix snapshot only; never fetch the list over the network.
_TLD_EXTRACTOR = tldextract.TLDExtract(suffix_list_urls=())


# -------------------------
# Platform helpers
# -------------------------


def default_hosts_path() -> Path:
    """Return the system hosts file location for the running platform."""
    if sys.platform.startswith("win"):
        system_root = os.environ.get("SystemRoot", r"C:\Windows")
        return Path(system_root) / "System32" / "drivers" / "etc" / "hosts"
    return Path("/etc/hosts")


def is_privileged() -> bool:
    """True if the current process can write system files without elevation."""
    geteuid = getattr(os, "geteuid", None)
    if geteuid is None:
        return False
    return geteuid() == 0


# -------------------------
# Line helpers
# -------------------------


def is_comment_or_blank(line: str | None) -> bool:
    """True for empty lines and lines whose first non-space char is '#'."""
    if line is None:
        return True
    s = line.strip()
    return s == "" or s.startswith(COMMENT_MARKER)


def split_tokens(line: str) -> list[str]:
    """Split a trimmed line on runs of whitespace, dropping empty tokens."""
    return [tok for tok in _TOKEN_SPLIT_RE.split(line.strip()) if tok]


# -------------------------
# Domain helpers
# -------------------------


@lru_cache(maxsize=DOMAIN_CACHE_SIZE)
def registrable_domain(name: str) -> str:
    """
    Return the registrable domain (eTLD+1) for `name`.

    Names without a public suffix (``localhost``, bare labels, IP literals)
    are returned lowercased and unchanged.
    """
    d = name.strip().lower().rstrip(".")
    if not d:
        return d
    ext = _TLD_EXTRACTOR(d)
    if ext.domain and ext.suffix:
        return f"{ext.domain}.{ext.suffix}"
    return d


__all__ = [
    "DEFAULT_TIMEOUT",
    "DEFAULT_LOOKUP_ENDPOINT",
    "DEFAULT_ELEVATE_CMD",
    "BACKUP_SUFFIX",
    "DOMAIN_CACHE_SIZE",
    "IO_BUFFER_SIZE",
    "COMMENT_MARKER",
    "default_hosts_path",
    "is_privileged",
    "is_comment_or_blank",
    "split_tokens",
    "registrable_domain",
]
