"""
Tests for `domain/sale.py`.

Covers contract rules:
- Sale ids are unique and carry the product prefix.
- A stored NULL status reads back as pending.
- Sale is immutable (frozen); CPF must be digits-only when inserted.
- Stored rows read back even when their CPF is blank.
"""

from __future__ import annotations

from dataclasses import FrozenInstanceError

import pytest

from domain.sale import PRODUCT_NAME, Sale, SaleStatus, generate_sale_id


def test_generate_sale_id_is_prefixed_and_unique() -> None:
    ids = {generate_sale_id() for _ in range(1000)}

    assert len(ids) == 1000
    assert all(sale_id.startswith("apostila_") for sale_id in ids)


def test_sale_defaults_to_pending_without_payment() -> None:
    sale = Sale(id="s1", name="Ana Souza", email="a@x.com", cpf="11122233344")

    assert sale.status is SaleStatus.PENDING
    assert sale.payment_id is None
    assert sale.whatsapp is None
    assert sale.product == PRODUCT_NAME
    assert sale.is_paid is False


def test_sale_rejects_non_digit_cpf_on_insert() -> None:
    sale = Sale(id="s1", name="Ana", email="a@x.com", cpf="111.222.333-44")

    with pytest.raises(ValueError):
        sale.validate_for_insert()


def test_from_row_accepts_legacy_blank_cpf() -> None:
    """Rows stored before CPF validation may hold an empty or NULL cpf."""

    for cpf in ("", None):
        sale = Sale.from_row({"id": "apostila_1", "cpf": cpf, "status": "paid"})

        assert sale.cpf == ""
        assert sale.status is SaleStatus.PAID


def test_sale_is_immutable() -> None:
    sale = Sale(id="s1", name="Ana", email="a@x.com", cpf="11122233344")

    with pytest.raises(FrozenInstanceError):
        sale.status = SaleStatus.PAID  # type: ignore[misc]


def test_from_row_treats_null_status_as_pending() -> None:
    row = {
        "id": "apostila_1",
        "name": "Ana Souza",
        "email": "a@x.com",
        "cpf": "11122233344",
        "product": PRODUCT_NAME,
        "payment_id": 123456,
        "status": None,
        "whatsapp": None,
    }

    sale = Sale.from_row(row)

    assert sale.status is SaleStatus.PENDING
    assert sale.payment_id == "123456"


def test_to_row_has_table_columns() -> None:
    sale = Sale(id="s1", name="Ana", email="a@x.com", cpf="11122233344")

    assert set(sale.to_row()) == {
        "id", "name", "email", "cpf", "product", "payment_id", "status", "whatsapp",
    }
    assert sale.to_row()["status"] == "pending"
