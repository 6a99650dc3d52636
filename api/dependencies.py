"""
Dependency providers.

Settings and external clients are built once per process and shared by every
request. Tests replace them through `app.dependency_overrides`.
"""

from __future__ import annotations

import logging
from functools import lru_cache

from fastapi import FastAPI

from config.settings import Settings, load_settings
from repositories.client import create_supabase_client
from repositories.sale_repository import SupabaseSaleRepository
from services.notification_service import SmtpNotificationSender
from services.payment_gateway import MercadoPagoGateway
from services.sale_service import SaleService

logger = logging.getLogger(__name__)


@lru_cache
def get_settings() -> Settings:
    return load_settings()


def build_sale_service(settings: Settings) -> SaleService:
    """
    Wire the sale service from settings.

    Collaborators whose configuration is missing or unusable are left out;
    the service reports a `ConfigurationError` when an operation needs them.
    """

    repository = None
    if settings.store_configured:
        try:
            client = create_supabase_client(settings)
        except Exception:
            # e.g. a malformed SUPABASE_URL; store operations report ConfigurationError
            logger.exception("Could not create Supabase client; sale store disabled")
        else:
            repository = SupabaseSaleRepository(client, table=settings.sales_table)
    else:
        logger.warning("SUPABASE_URL/SUPABASE_KEY not set; sale store disabled")

    gateway = None
    if settings.mercado_pago_token:
        gateway = MercadoPagoGateway(settings.mercado_pago_token)
    else:
        logger.warning("MERCADO_PAGO_TOKEN not set; payments disabled")

    if not settings.email_configured:
        logger.warning("EMAIL_USER/EMAIL_PASS not set; booklet e-mails will be skipped")

    notifier = SmtpNotificationSender(
        attachment_path=settings.apostila_file_path,
        user=settings.email_user,
        password=settings.email_pass,
        host=settings.smtp_host,
        port=settings.smtp_port,
    )

    return SaleService(
        settings=settings,
        repository=repository,
        gateway=gateway,
        notifier=notifier,
    )


@lru_cache
def get_sale_service() -> SaleService:
    return build_sale_service(get_settings())


def resolve_sale_service(app: FastAPI) -> SaleService:
    """
    Resolve the sale service outside of `Depends`, honouring overrides.

    Used where a failure to build the service must be handled by the caller
    instead of turning into a 500 response.
    """

    provider = app.dependency_overrides.get(get_sale_service, get_sale_service)
    return provider()


__all__ = ["get_settings", "get_sale_service", "build_sale_service", "resolve_sale_service"]
