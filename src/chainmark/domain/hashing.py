"""Content fingerprints for certificate payloads."""

from __future__ import annotations

import hashlib


def digest(content: bytes) -> str:
    """Return the SHA-256 hex digest of ``content``."""

    return hashlib.sha256(content).hexdigest()
