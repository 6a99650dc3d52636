"""
Supabase client initialization.

This module contains *only* the database connection setup. The client is
built from `Settings` once at startup and handed to the repositories, so
nothing connects at import time and a missing credential surfaces as a
`ConfigurationError` on first use instead of an import failure.
"""

from __future__ import annotations

from config.settings import Settings

# The dependency is `supabase` (supabase-py). If your editor can't resolve it,
# install it in your environment: `pip install supabase`.
from supabase import Client, create_client  # type: ignore[import-not-found]


def create_supabase_client(settings: Settings) -> Client:
    """
    Create the Supabase client for the configured project.

    Raises:
        ConfigurationError: SUPABASE_URL or SUPABASE_KEY is not set
    """

    settings.require_store_config()
    return create_client(settings.supabase_url, settings.supabase_key)


__all__ = ["create_supabase_client", "Client"]
