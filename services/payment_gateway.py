"""
Mercado Pago gateway client.

Creates Pix payments and looks up payment details through the Mercado Pago
REST API (https://api.mercadopago.com/v1/payments).

Transport failures, non-2xx answers and responses missing the fields we rely
on are all raised as `GatewayError`. No retry is attempted.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional

import httpx

from domain.buyer import Payer
from services.errors import GatewayError

logger = logging.getLogger(__name__)

MERCADO_PAGO_API_URL: str = "https://api.mercadopago.com"


@dataclass(frozen=True, slots=True)
class PixPayment:
    """Gateway acknowledgment of a Pix payment request."""

    payment_id: str
    qr_code: str  # Pix "copia e cola" text
    qr_code_base64: str  # PNG image of the QR code, base64-encoded


@dataclass(frozen=True, slots=True)
class PaymentDetails:
    """Subset of a gateway payment we act on."""

    payment_id: str
    status: Optional[str]  # approved, pending, rejected, cancelled, ...
    external_reference: Optional[str]  # our sale id

    @property
    def is_approved(self) -> bool:
        return self.status == "approved"


class MercadoPagoGateway:
    """
    Thin client over the Mercado Pago payments endpoint.

    The underlying `httpx.Client` is created once and reused for the life of
    the process.
    """

    def __init__(
        self,
        access_token: str,
        http_client: Optional[httpx.Client] = None,
        base_url: str = MERCADO_PAGO_API_URL,
    ) -> None:
        self._access_token = access_token
        self._http = http_client or httpx.Client(timeout=30.0)
        self._base_url = base_url.rstrip("/")

    def _headers(self, idempotency_key: Optional[str] = None) -> dict[str, str]:
        headers = {
            "Authorization": f"Bearer {self._access_token}",
            "Content-Type": "application/json",
        }
        if idempotency_key:
            headers["X-Idempotency-Key"] = idempotency_key
        return headers

    def _request(self, method: str, path: str, **kwargs: Any) -> dict[str, Any]:
        url = f"{self._base_url}{path}"
        try:
            response = self._http.request(method, url, **kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise GatewayError(
                f"Mercado Pago answered {e.response.status_code} on {method} {path}: "
                f"{e.response.text[:500]}"
            ) from e
        except httpx.HTTPError as e:
            raise GatewayError(f"Mercado Pago request failed on {method} {path}: {e}") from e

        try:
            body = response.json()
        except ValueError as e:
            raise GatewayError(f"Mercado Pago returned a non-JSON body on {method} {path}") from e

        if not isinstance(body, dict):
            raise GatewayError(f"Mercado Pago returned an unexpected body on {method} {path}")
        return body

    def create_pix_payment(
        self,
        *,
        amount: float,
        description: str,
        payer: Payer,
        notification_url: str,
        external_reference: str,
    ) -> PixPayment:
        """
        Request a Pix payment.

        `external_reference` doubles as the idempotency key, so a retried
        request for the same sale cannot create a second charge.

        Raises:
            GatewayError: call failed or the response lacks the QR code data
        """

        payload = {
            "transaction_amount": amount,
            "description": description,
            "payment_method_id": "pix",
            "payer": payer.to_gateway_payload(),
            "notification_url": notification_url,
            "external_reference": external_reference,
        }

        body = self._request(
            "POST",
            "/v1/payments",
            json=payload,
            headers=self._headers(idempotency_key=external_reference),
        )

        try:
            transaction_data = body["point_of_interaction"]["transaction_data"]
            payment = PixPayment(
                payment_id=str(body["id"]),
                qr_code=transaction_data["qr_code"],
                qr_code_base64=transaction_data["qr_code_base64"],
            )
        except (KeyError, TypeError) as e:
            raise GatewayError(f"Unexpected Pix payment response shape: missing {e}") from e

        logger.info(
            "Pix payment created",
            extra={"sale_id": external_reference, "payment_id": payment.payment_id},
        )
        return payment

    def get_payment(self, payment_id: str) -> PaymentDetails:
        """
        Fetch a payment by its gateway id.

        Raises:
            GatewayError: call failed or the response has no id
        """

        body = self._request("GET", f"/v1/payments/{payment_id}", headers=self._headers())

        if body.get("id") is None:
            raise GatewayError(f"Unexpected payment response shape for {payment_id}: missing 'id'")

        reference = body.get("external_reference")
        return PaymentDetails(
            payment_id=str(body["id"]),
            status=body.get("status"),
            external_reference=str(reference) if reference else None,
        )


__all__ = ["MercadoPagoGateway", "PixPayment", "PaymentDetails", "MERCADO_PAGO_API_URL"]
