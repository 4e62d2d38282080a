"""Content hashing for import version tokens."""

from __future__ import annotations

import hashlib

# Length of the hex digest embedded in rewritten specifiers
HASH_LENGTH = 32


def content_hash(data: bytes) -> str:
    """Return the MD5 hex digest of module content.

    Used only as a cache-busting token, never for security.
    """
    return hashlib.md5(data, usedforsecurity=False).hexdigest()
