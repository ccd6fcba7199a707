from __future__ import annotations

import re
from datetime import UTC, datetime

import pytest

from chainmark.domain.errors import ValidationError
from chainmark.domain.model import (
    PLACEHOLDER_PREFIX,
    Anchored,
    CustodyStage,
    NewProduct,
    Unanchored,
    is_placeholder_reference,
    placeholder_reference,
)

PLACEHOLDER_PATTERN = re.compile(r"^unanchored-\d+-[0-9a-f]{8}$")


def test_placeholder_reference_is_time_derived_and_prefixed() -> None:
    reference = placeholder_reference(now_ms=1_700_000_000_000)

    assert reference.startswith(f"{PLACEHOLDER_PREFIX}1700000000000-")
    assert PLACEHOLDER_PATTERN.match(reference)
    assert is_placeholder_reference(reference)


def test_placeholder_references_are_unique() -> None:
    references = {placeholder_reference(now_ms=1) for _ in range(20)}

    assert len(references) == 20


@pytest.mark.parametrize("reference", ["tx-42", "0xabc", "", None])
def test_real_references_are_not_placeholders(reference: str | None) -> None:
    assert not is_placeholder_reference(reference)


def test_anchoring_tags() -> None:
    assert Anchored(reference="tx-1").is_anchored
    assert not Unanchored(reason="timeout").is_anchored


def test_new_product_requires_id_and_name() -> None:
    with pytest.raises(ValidationError):
        NewProduct(product_id="", name="Coffee")
    with pytest.raises(ValidationError):
        NewProduct(product_id=" P1 ", name="Coffee")
    with pytest.raises(ValidationError):
        NewProduct(product_id="P1", name="  ")


def test_build_produces_product_with_empty_custody_chain() -> None:
    draft = NewProduct(
        product_id="P1",
        name="Coffee",
        origin="Huila",
        manufacturer="Finca",
        created_by_wallet="0xwallet",
    )

    product = draft.build(certification_hash="abc", blockchain_ref_hash="tx-1")

    assert product.product_id == "P1"
    assert product.certification_hash == "abc"
    assert product.blockchain_ref_hash == "tx-1"
    assert product.created_by_wallet == "0xwallet"
    assert product.stages == ()
    assert product.created_at.tzinfo is not None


def test_ledger_fields_carry_descriptive_data_only() -> None:
    draft = NewProduct(product_id="P1", name="Coffee", created_by_wallet="0xwallet")

    assert draft.ledger_fields("abc") == {
        "name": "Coffee",
        "origin": "",
        "manufacturer": "",
        "certificationHash": "abc",
    }


def test_payload_uses_camel_case_keys() -> None:
    product = NewProduct(product_id="P1", name="Coffee").build(
        certification_hash="abc", blockchain_ref_hash="tx-1"
    )
    product.created_at = datetime(2024, 1, 1, tzinfo=UTC)

    payload = product.as_payload()

    assert payload == {
        "productId": "P1",
        "name": "Coffee",
        "origin": "",
        "manufacturer": "",
        "certificationHash": "abc",
        "blockchainRefHash": "tx-1",
        "stages": [],
        "createdByWallet": None,
        "certFile": None,
        "imageFile": None,
        "createdAt": "2024-01-01T00:00:00+00:00",
    }


def test_custody_stage_defaults() -> None:
    stage = CustodyStage(label="shipped")

    assert stage.seq is None
    assert stage.recorded_at.tzinfo is not None
