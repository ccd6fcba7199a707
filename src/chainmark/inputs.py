"""Pydantic models validating caller-supplied product fields."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PayloadValidationError

from chainmark.domain.errors import ValidationError
from chainmark.domain.model import NewProduct

type UnknownFieldPolicy = Literal["reject", "ignore"]


class ProductFields(BaseModel):
    """Every field accepted when creating a product, under its JSON name."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True, str_strip_whitespace=True)

    product_id: str = Field(alias="productId", min_length=1)
    name: str = Field(min_length=1)
    origin: str = ""
    manufacturer: str = ""
    blockchain_ref_hash: str = Field(default="", alias="blockchainRefHash")
    created_by_wallet: str | None = Field(default=None, alias="createdByWallet")
    cert_file: str | None = Field(default=None, alias="certFile")
    image_file: str | None = Field(default=None, alias="imageFile")

    def to_new_product(self) -> NewProduct:
        return NewProduct(
            product_id=self.product_id,
            name=self.name,
            origin=self.origin,
            manufacturer=self.manufacturer,
            blockchain_ref_hash=self.blockchain_ref_hash,
            created_by_wallet=self.created_by_wallet or None,
            cert_file=self.cert_file or None,
            image_file=self.image_file or None,
        )


class _LenientProductFields(ProductFields):
    model_config = ConfigDict(extra="ignore", populate_by_name=True, str_strip_whitespace=True)


def parse_product_fields(
    data: Mapping[str, object],
    *,
    unknown_fields: UnknownFieldPolicy = "reject",
) -> NewProduct:
    """Validate raw fields into a ``NewProduct``.

    Unknown keys raise ``ValidationError`` under ``"reject"`` and are dropped under
    ``"ignore"``; they are never merged into the stored product.
    """

    model = ProductFields if unknown_fields == "reject" else _LenientProductFields
    try:
        fields = model.model_validate(dict(data))
    except PayloadValidationError as exc:
        problems = "; ".join(
            f"{'.'.join(str(part) for part in error['loc']) or 'input'}: {error['msg']}"
            for error in exc.errors()
        )
        raise ValidationError(f"Invalid product fields: {problems}") from exc
    return fields.to_new_product()
