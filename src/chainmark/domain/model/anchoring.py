"""Outcome of an attempt to anchor local state on the external ledger."""

from __future__ import annotations

import secrets
import time
from dataclasses import dataclass
from typing import Final

PLACEHOLDER_PREFIX: Final[str] = "unanchored-"


@dataclass(frozen=True, slots=True)
class Anchored:
    """The ledger accepted the write; ``reference`` is its transaction reference."""

    reference: str

    @property
    def is_anchored(self) -> bool:
        return True


@dataclass(frozen=True, slots=True)
class Unanchored:
    """The ledger write did not happen; ``reason`` says why."""

    reason: str

    @property
    def is_anchored(self) -> bool:
        return False


type Anchoring = Anchored | Unanchored


def placeholder_reference(*, now_ms: int | None = None) -> str:
    """Synthesize a local stand-in reference, e.g. ``unanchored-1700000000000-9f2c1ab0``."""

    stamp = now_ms if now_ms is not None else time.time_ns() // 1_000_000
    return f"{PLACEHOLDER_PREFIX}{stamp}-{secrets.token_hex(4)}"


def is_placeholder_reference(reference: str | None) -> bool:
    return reference is not None and reference.startswith(PLACEHOLDER_PREFIX)
