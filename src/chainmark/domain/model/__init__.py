"""Public domain model surface."""

from __future__ import annotations

from chainmark.domain.model.anchoring import (
    PLACEHOLDER_PREFIX,
    Anchored,
    Anchoring,
    Unanchored,
    is_placeholder_reference,
    placeholder_reference,
)
from chainmark.domain.model.product import CustodyStage, NewProduct, Product, utcnow

__all__ = [
    "PLACEHOLDER_PREFIX",
    "Anchored",
    "Anchoring",
    "CustodyStage",
    "NewProduct",
    "Product",
    "Unanchored",
    "is_placeholder_reference",
    "placeholder_reference",
    "utcnow",
]
