"""
Domain: Sale records.

One row per purchase attempt of the booklet.

Contract excerpts relevant here:
- A Sale is identified by its generated id for its entire lifetime.
- Status moves only from pending to paid, never back.
- The buyer's CPF is stored digits-only.

This module only describes the record. Persistence lives in
`repositories.sale_repository`; the lifecycle lives in `services.sale_service`.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Optional
from uuid import uuid4

# Prefix carried by every sale id; identifies the product being sold.
SALE_ID_PREFIX: str = "apostila"

PRODUCT_NAME: str = "Apostila Digital - Módulo I"
PRODUCT_DESCRIPTION: str = "Apostila Digital - Módulo I: Luto Mal Resolvido"
PRODUCT_PRICE: float = 19.90


class SaleStatus(str, Enum):
    """Payment state of a sale."""

    PENDING = "pending"
    PAID = "paid"

    @classmethod
    def from_value(cls, value: Any) -> "SaleStatus":
        """Map a stored value to a status. A missing status means pending."""
        if value is None or value == "":
            return cls.PENDING
        return cls(str(value))


def generate_sale_id() -> str:
    """Return a new random sale id, e.g. ``apostila_3f2b...``."""
    return f"{SALE_ID_PREFIX}_{uuid4().hex}"


@dataclass(frozen=True, slots=True)
class Sale:
    """
    Immutable snapshot of a sale row.

    `payment_id` is None until the gateway acknowledges the payment request.
    `whatsapp` is optional contact info captured after checkout.
    """

    id: str
    name: str
    email: str
    cpf: str
    product: str = PRODUCT_NAME
    payment_id: Optional[str] = None
    status: SaleStatus = SaleStatus.PENDING
    whatsapp: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("id must be a non-empty string")

    def validate_for_insert(self) -> None:
        """
        Checks applied before a new sale is written.

        Rows read back from the store are not re-validated; older rows may
        carry an empty CPF.
        """
        if not self.cpf.isdigit():
            raise ValueError("cpf must contain digits only")

    @property
    def is_paid(self) -> bool:
        return self.status is SaleStatus.PAID

    def to_row(self) -> dict[str, Any]:
        """Serialize to a `vendas_apostila` row."""
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "cpf": self.cpf,
            "product": self.product,
            "payment_id": self.payment_id,
            "status": self.status.value,
            "whatsapp": self.whatsapp,
        }

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Sale":
        """Build a Sale from a stored row (unknown columns are ignored)."""
        payment_id = row.get("payment_id")
        return cls(
            id=str(row["id"]),
            name=str(row.get("name") or ""),
            email=str(row.get("email") or ""),
            cpf=str(row.get("cpf") or ""),
            product=str(row.get("product") or PRODUCT_NAME),
            payment_id=str(payment_id) if payment_id is not None else None,
            status=SaleStatus.from_value(row.get("status")),
            whatsapp=row.get("whatsapp"),
        )
