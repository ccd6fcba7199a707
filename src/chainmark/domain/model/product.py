"""Product provenance records: the locally owned system of record."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime

from chainmark.domain.errors import ValidationError


def utcnow() -> datetime:
    return datetime.now(UTC)


@dataclass(eq=False, kw_only=True)
class CustodyStage:
    """One custody-chain event. ``seq`` is assigned by the store on insert."""

    label: str
    recorded_at: datetime = field(default_factory=utcnow)
    seq: int | None = field(default=None, init=False)


@dataclass(eq=False, kw_only=True)
class Product:
    """A physical product as recorded locally.

    ``stages`` is append-only and ordered by insertion; ``certification_hash`` is fixed
    at creation; ``blockchain_ref_hash`` points at the latest anchoring transaction
    (or a placeholder) and is never cleared.
    """

    product_id: str
    name: str
    origin: str = ""
    manufacturer: str = ""
    certification_hash: str = ""
    blockchain_ref_hash: str = ""
    created_by_wallet: str | None = None
    cert_file: str | None = None
    image_file: str | None = None
    created_at: datetime = field(default_factory=utcnow)
    _stages: list[CustodyStage] = field(default_factory=list["CustodyStage"], init=False, repr=False)

    @property
    def stages(self) -> tuple[str, ...]:
        return tuple(stage.label for stage in self._stages)

    @property
    def custody_chain(self) -> tuple[CustodyStage, ...]:
        return tuple(self._stages)

    def as_payload(self) -> dict[str, object]:
        return {
            "productId": self.product_id,
            "name": self.name,
            "origin": self.origin,
            "manufacturer": self.manufacturer,
            "certificationHash": self.certification_hash,
            "blockchainRefHash": self.blockchain_ref_hash,
            "stages": list(self.stages),
            "createdByWallet": self.created_by_wallet,
            "certFile": self.cert_file,
            "imageFile": self.image_file,
            "createdAt": self.created_at.isoformat(),
        }


@dataclass(frozen=True, slots=True, kw_only=True)
class NewProduct:
    """Validated caller input for product creation.

    ``blockchain_ref_hash`` is an optional caller-supplied reference kept for records
    certified outside this system; it seeds ``certification_hash`` when no certificate
    content is supplied and is the first fallback when anchoring fails.
    """

    product_id: str
    name: str
    origin: str = ""
    manufacturer: str = ""
    blockchain_ref_hash: str = ""
    created_by_wallet: str | None = None
    cert_file: str | None = None
    image_file: str | None = None

    def __post_init__(self) -> None:
        if not self.product_id or not self.product_id.strip():
            raise ValidationError("productId is required")
        if self.product_id != self.product_id.strip():
            raise ValidationError("productId must not have surrounding whitespace")
        if not self.name or not self.name.strip():
            raise ValidationError("name is required")

    def ledger_fields(self, certification_hash: str) -> dict[str, str]:
        return {
            "name": self.name,
            "origin": self.origin,
            "manufacturer": self.manufacturer,
            "certificationHash": certification_hash,
        }

    def build(self, *, certification_hash: str, blockchain_ref_hash: str) -> Product:
        return Product(
            product_id=self.product_id,
            name=self.name,
            origin=self.origin,
            manufacturer=self.manufacturer,
            certification_hash=certification_hash,
            blockchain_ref_hash=blockchain_ref_hash,
            created_by_wallet=self.created_by_wallet,
            cert_file=self.cert_file,
            image_file=self.image_file,
        )
