"""
Check orphaned sales - pending sales whose payment request never succeeded.

Such rows are left behind when Mercado Pago rejects or fails the payment
creation after the sale was stored. Nothing is modified; follow up manually.
"""

import sys
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from config.settings import load_settings
from repositories.client import create_supabase_client
from repositories.sale_repository import SupabaseSaleRepository


def check_orphaned_sales(limit: int = 1000):
    """Print pending sales that have no payment id."""

    settings = load_settings()
    repository = SupabaseSaleRepository(create_supabase_client(settings), table=settings.sales_table)
    orphaned = repository.list_orphaned(limit=limit)

    print("=" * 50)
    print("ORPHANED SALES (pending, no payment id)")
    print("=" * 50)
    print(f"Total: {len(orphaned)}")
    print("-" * 50)

    for sale in orphaned:
        print(f"{sale.id}  {sale.email}  {sale.name}")

    print("=" * 50)
    return orphaned


if __name__ == "__main__":
    check_orphaned_sales()
