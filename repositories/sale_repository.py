"""
Sale repository (persistence).

This module provides *only* persistence operations for the Sale domain
entity. It does not enforce the purchase lifecycle; it inserts, fetches and
updates sale rows in Supabase.

Every Supabase failure (raised `APIError` or a response carrying `error`) is
turned into `PersistenceError`.
"""

from __future__ import annotations

from typing import Any, Callable, List, Optional

from postgrest.exceptions import APIError

from domain.sale import Sale, SaleStatus
from services.errors import PersistenceError

# Supabase table name for sales.
# Keep this aligned with your database schema.
DEFAULT_SALES_TABLE: str = "vendas_apostila"


def _execute(build: Callable[[], Any], action: str) -> List[dict[str, Any]]:
    """Run a query builder and return its rows, raising PersistenceError on failure."""

    try:
        response = build().execute()
    except APIError as e:
        raise PersistenceError(f"Failed to {action}: {e.message or e}") from e

    error = getattr(response, "error", None)
    if error:
        raise PersistenceError(f"Failed to {action}: {error}")

    return getattr(response, "data", None) or []


class SupabaseSaleRepository:
    """Sale store backed by a Supabase (PostgREST) table."""

    def __init__(self, client: Any, table: str = DEFAULT_SALES_TABLE) -> None:
        self._client = client
        self._table = table

    def _query(self):
        return self._client.table(self._table)

    def insert(self, sale: Sale) -> Sale:
        """
        Insert a new sale row.

        Args:
            sale: Sale to persist (normally pending, without payment_id)

        Returns:
            The same Sale once the store accepted it

        Raises:
            ValueError: the sale fails `Sale.validate_for_insert`
        """

        sale.validate_for_insert()
        _execute(lambda: self._query().insert(sale.to_row()), "insert sale")
        return sale

    def get(self, sale_id: str) -> Optional[Sale]:
        """
        Retrieve a single sale by its id.

        Returns:
            Sale or None if not found
        """

        rows = _execute(
            lambda: self._query().select("*").eq("id", sale_id).limit(1),
            "get sale",
        )
        if not rows:
            return None
        return Sale.from_row(rows[0])

    def set_payment_id(self, sale_id: str, payment_id: str) -> None:
        """Record the gateway payment id acknowledged for a sale."""

        _execute(
            lambda: self._query().update({"payment_id": payment_id}).eq("id", sale_id),
            "update payment id",
        )

    def mark_paid(self, sale_id: str) -> Optional[Sale]:
        """
        Transition a sale to paid with a single conditional update.

        Only rows whose status is not already `paid` (or is NULL, the legacy
        pending marker) are touched, so two concurrent calls cannot both win.

        Returns:
            The updated Sale, or None when no row matched (unknown sale or
            already paid)
        """

        rows = _execute(
            lambda: (
                self._query()
                .update({"status": SaleStatus.PAID.value})
                .eq("id", sale_id)
                .or_(f"status.is.null,status.neq.{SaleStatus.PAID.value}")
            ),
            "mark sale as paid",
        )
        if not rows:
            return None
        return Sale.from_row(rows[0])

    def set_whatsapp(self, sale_id: str, whatsapp: str) -> None:
        """Store a contact number. Updating an unknown id matches no rows and is not an error."""

        _execute(
            lambda: self._query().update({"whatsapp": whatsapp}).eq("id", sale_id),
            "save whatsapp",
        )

    def list_orphaned(self, limit: int = 1000) -> List[Sale]:
        """
        List pending sales that never received a gateway payment id.

        These are purchase attempts whose payment request failed after the
        row was inserted.
        """

        rows = _execute(
            lambda: (
                self._query()
                .select("*")
                .is_("payment_id", "null")
                .or_(f"status.is.null,status.neq.{SaleStatus.PAID.value}")
                .limit(limit)
            ),
            "list orphaned sales",
        )
        return [Sale.from_row(row) for row in rows]


__all__ = ["SupabaseSaleRepository", "DEFAULT_SALES_TABLE"]
