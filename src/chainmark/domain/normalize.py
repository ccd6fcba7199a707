"""Conversion of ledger-native values into transport-safe data.

Ledgers hand back unsigned 256-bit quantities and similar integers that JSON
consumers cannot represent losslessly, so every integer leaf is rendered as its
decimal string. The traversal is independent of any ledger client library.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from functools import singledispatch
from typing import Final

from .errors import SerializationError

DEFAULT_MAX_DEPTH: Final[int] = 64


def normalize(value: object, *, max_depth: int = DEFAULT_MAX_DEPTH) -> object:
    """Return ``value`` with integers stringified, preserving structure and order.

    Raises ``SerializationError`` when nesting exceeds ``max_depth``; self-referencing
    structures hit this limit instead of recursing forever.
    """

    if max_depth < 0:
        raise ValueError("max_depth must be non-negative")
    return _normalize(value, 0, max_depth)


@singledispatch
def _normalize(value: object, depth: int, max_depth: int) -> object:  # noqa: ARG001
    return value


@_normalize.register
def _(value: bool, depth: int, max_depth: int) -> object:  # noqa: ARG001, FBT001
    return value


@_normalize.register
def _(value: int, depth: int, max_depth: int) -> object:  # noqa: ARG001
    return str(value)


@_normalize.register(str)
@_normalize.register(bytes)
@_normalize.register(bytearray)
def _(value: object, depth: int, max_depth: int) -> object:  # noqa: ARG001
    return value


@_normalize.register
def _(value: Mapping, depth: int, max_depth: int) -> object:  # type: ignore[type-arg]
    _check_depth(depth, max_depth)
    return {key: _normalize(item, depth + 1, max_depth) for key, item in value.items()}


@_normalize.register
def _(value: Sequence, depth: int, max_depth: int) -> object:  # type: ignore[type-arg]
    _check_depth(depth, max_depth)
    return [_normalize(item, depth + 1, max_depth) for item in value]


def _check_depth(depth: int, max_depth: int) -> None:
    if depth >= max_depth:
        raise SerializationError(f"Ledger value nested deeper than {max_depth} levels")
