"""Pydantic models describing the ledger gateway payloads."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator


class LedgerBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class CreateRecordRequest(LedgerBaseModel):
    product_id: str = Field(serialization_alias="productId")
    name: str
    origin: str = ""
    manufacturer: str = ""
    certification_hash: str = Field(default="", serialization_alias="certificationHash")


class AppendStageRequest(LedgerBaseModel):
    stage: str


class TransactionResponse(LedgerBaseModel):
    transaction_hash: str = Field(alias="transactionHash")

    @field_validator("transaction_hash")
    @classmethod
    def _require_reference(cls, value: str) -> str:
        stripped = value.strip()
        if not stripped:
            raise ValueError("transactionHash must not be blank")
        return stripped


class RecordResponse(LedgerBaseModel):
    # Left untyped: on-chain structs may carry integers of any width.
    record: dict[str, object]


class ErrorDetail(LedgerBaseModel):
    code: int | None = None
    message: str


class ErrorResponse(LedgerBaseModel):
    error: ErrorDetail
