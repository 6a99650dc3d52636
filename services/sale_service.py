"""
Sale service: the purchase-to-fulfillment lifecycle.

Handles:
- Purchase initiation (sale row first, then the Pix payment request)
- Payment confirmation from the gateway webhook (pending -> paid, then e-mail)
- Status lookups and WhatsApp contact capture

All state lives in the sale store; the service keeps none between calls.
Nothing is retried. A sale whose payment request failed stays pending without
a payment id and is reported by `scripts/check_orphaned_sales.py`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Optional

from config.settings import Settings
from domain.buyer import Payer
from domain.sale import (
    PRODUCT_DESCRIPTION,
    PRODUCT_NAME,
    PRODUCT_PRICE,
    Sale,
    SaleStatus,
    generate_sale_id,
)
from repositories.sale_repository import SupabaseSaleRepository
from services.errors import (
    ConfigurationError,
    GatewayError,
    InvalidRequest,
    NotFound,
    PersistenceError,
)
from services.notification_service import SmtpNotificationSender
from services.payment_gateway import MercadoPagoGateway

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class PaymentInstructions:
    """What the buyer needs to pay: the sale id and the Pix QR code."""

    sale_id: str
    qr_code_text: str
    qr_code_base64: str


@dataclass(frozen=True, slots=True)
class PaymentNotification:
    """
    Webhook notification from the gateway.

    Mercado Pago sends the event either as a JSON body
    (`{"type": "payment", "data": {"id": "123"}}`) or as query parameters
    (`?type=payment&data.id=123`, older `?topic=payment&id=123`).
    """

    type: Optional[str]
    payment_id: Optional[str]

    @classmethod
    def parse(
        cls,
        body: Optional[Mapping[str, Any]],
        query: Optional[Mapping[str, str]] = None,
    ) -> "PaymentNotification":
        body = body if isinstance(body, Mapping) else {}
        query = query or {}

        kind = body.get("type") or body.get("topic") or query.get("type") or query.get("topic")

        data = body.get("data")
        payment_id = data.get("id") if isinstance(data, Mapping) else None
        if payment_id is None:
            payment_id = query.get("data.id") or query.get("id")

        return cls(
            type=str(kind) if kind else None,
            payment_id=str(payment_id) if payment_id not in (None, "") else None,
        )

    @property
    def is_payment(self) -> bool:
        return self.type == "payment" and self.payment_id is not None


class NotificationOutcome(str, Enum):
    """What a webhook delivery ended up doing."""

    IGNORED = "ignored"
    NOT_APPROVED = "not_approved"
    ALREADY_HANDLED = "already_handled"
    PAID = "paid"
    FAILED = "failed"


def _require(value: Optional[str], field: str) -> str:
    if value is None or not str(value).strip():
        raise InvalidRequest(f"Missing required field: {field}")
    return str(value).strip()


class SaleService:
    """
    Coordinates the sale store, the payment gateway and the e-mail sender.

    The collaborators are built once at startup and injected. `repository`
    and `gateway` may be None when their configuration is absent; operations
    that need them fail with `ConfigurationError` before any side effect.
    """

    def __init__(
        self,
        settings: Settings,
        repository: Optional[SupabaseSaleRepository],
        gateway: Optional[MercadoPagoGateway],
        notifier: SmtpNotificationSender,
    ) -> None:
        self._settings = settings
        self._repository = repository
        self._gateway = gateway
        self._notifier = notifier

    def _require_repository(self) -> SupabaseSaleRepository:
        self._settings.require_store_config()
        if self._repository is None:
            raise ConfigurationError("Sale store is not available")
        return self._repository

    def _require_gateway(self) -> MercadoPagoGateway:
        self._settings.require_payment_config()
        if self._gateway is None:
            raise ConfigurationError("Payment gateway is not available")
        return self._gateway

    # ------------------------------------------------------------------
    # Purchase initiation
    # ------------------------------------------------------------------

    def create_payment(
        self,
        full_name: Optional[str],
        email: Optional[str],
        cpf: Optional[str],
    ) -> PaymentInstructions:
        """
        Register a sale and request its Pix payment.

        **Process:**
        1. Checks gateway and store configuration
        2. Validates name, e-mail and CPF are present
        3. Inserts the sale as pending (the gateway is never called if this fails)
        4. Requests a Pix payment with the sale id as idempotency key
        5. Stores the gateway payment id on the sale

        Raises:
            ConfigurationError: gateway or store credentials missing
            InvalidRequest: a field is missing, or the CPF has no digits
            PersistenceError: the store rejected the insert
            GatewayError: the payment request failed (sale stays pending)
        """

        gateway = self._require_gateway()
        repository = self._require_repository()

        full_name = _require(full_name, "fullName")
        email = _require(email, "email")
        cpf = _require(cpf, "cpf")

        payer = Payer.from_checkout(full_name, email, cpf)
        if not payer.cpf:
            raise InvalidRequest("cpf must contain digits")

        sale = Sale(
            id=generate_sale_id(),
            name=full_name,
            email=payer.email,
            cpf=payer.cpf,
            product=PRODUCT_NAME,
        )
        repository.insert(sale)
        logger.info("Sale registered", extra={"sale_id": sale.id})

        try:
            pix = gateway.create_pix_payment(
                amount=PRODUCT_PRICE,
                description=PRODUCT_DESCRIPTION,
                payer=payer,
                notification_url=self._settings.notification_url,
                external_reference=sale.id,
            )
        except GatewayError as e:
            logger.error(
                "Payment request failed; sale left pending without payment id",
                extra={"sale_id": sale.id, "error": e.message},
            )
            raise

        try:
            repository.set_payment_id(sale.id, pix.payment_id)
        except PersistenceError as e:
            # The charge exists and the webhook matches on external_reference,
            # so the buyer still gets the QR code.
            logger.error(
                "Could not store payment id",
                extra={"sale_id": sale.id, "payment_id": pix.payment_id, "error": e.message},
            )

        return PaymentInstructions(
            sale_id=sale.id,
            qr_code_text=pix.qr_code,
            qr_code_base64=pix.qr_code_base64,
        )

    # ------------------------------------------------------------------
    # Payment confirmation
    # ------------------------------------------------------------------

    def handle_payment_notification(self, notification: PaymentNotification) -> NotificationOutcome:
        """
        Process a gateway webhook delivery.

        Never raises: the gateway must always get an acknowledgment, so every
        failure is logged and reported as `NotificationOutcome.FAILED`.
        """

        try:
            return self._confirm_payment(notification)
        except Exception:
            logger.exception(
                "Error handling payment notification",
                extra={"notification_type": notification.type, "payment_id": notification.payment_id},
            )
            return NotificationOutcome.FAILED

    def _confirm_payment(self, notification: PaymentNotification) -> NotificationOutcome:
        if not notification.is_payment:
            logger.debug("Ignoring non-payment notification", extra={"notification_type": notification.type})
            return NotificationOutcome.IGNORED

        if not self._settings.payment_configured or self._gateway is None:
            logger.warning(
                "Payment notification received but gateway is not configured",
                extra={"payment_id": notification.payment_id},
            )
            return NotificationOutcome.IGNORED

        details = self._gateway.get_payment(notification.payment_id)
        if not details.is_approved or not details.external_reference:
            logger.info(
                "Payment not approved yet",
                extra={"payment_id": details.payment_id, "payment_status": details.status},
            )
            return NotificationOutcome.NOT_APPROVED

        repository = self._require_repository()
        sale = repository.mark_paid(details.external_reference)
        if sale is None:
            logger.info(
                "Sale unknown or already paid; nothing to do",
                extra={"sale_id": details.external_reference, "payment_id": details.payment_id},
            )
            return NotificationOutcome.ALREADY_HANDLED

        logger.info("Sale marked as paid", extra={"sale_id": sale.id, "payment_id": details.payment_id})
        self._notifier.send_apostila(sale)
        return NotificationOutcome.PAID

    # ------------------------------------------------------------------
    # Status and contact capture
    # ------------------------------------------------------------------

    def get_status(self, sale_id: Optional[str]) -> SaleStatus:
        """
        Current status of a sale.

        Raises:
            NotFound: no such sale, or the store could not be read
        """

        if sale_id is None or not sale_id.strip():
            raise NotFound("Missing sale id")

        repository = self._require_repository()
        try:
            sale = repository.get(sale_id.strip())
        except PersistenceError as e:
            logger.error("Status lookup failed", extra={"sale_id": sale_id, "error": e.message})
            raise NotFound(f"Sale not found: {sale_id}") from e

        if sale is None:
            raise NotFound(f"Sale not found: {sale_id}")
        return sale.status

    def save_whatsapp(self, sale_id: Optional[str], whatsapp: Optional[str]) -> None:
        """
        Attach a WhatsApp number to a sale.

        No existence check is made; an unknown id is a silent no-op.

        Raises:
            InvalidRequest: sale id or number missing
            PersistenceError: the store rejected the update
        """

        sale_id = _require(sale_id, "saleId")
        whatsapp = _require(whatsapp, "whatsapp")

        repository = self._require_repository()
        repository.set_whatsapp(sale_id, whatsapp)
        logger.info("WhatsApp saved", extra={"sale_id": sale_id})


__all__ = [
    "SaleService",
    "PaymentInstructions",
    "PaymentNotification",
    "NotificationOutcome",
]
