"""
Webhook Endpoints.

Mercado Pago calls these out-of-band when a payment changes. The answer is
always 200 with an empty body: any error status makes the gateway retry, so
failures are only logged.
"""

import logging

from fastapi import APIRouter, Request, Response
from starlette.concurrency import run_in_threadpool

from api.dependencies import resolve_sale_service
from services.sale_service import PaymentNotification

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/webhook-mp-apostila",
    status_code=200,
    summary="Mercado Pago Payment Webhook",
    response_class=Response,
)
async def mercado_pago_webhook(request: Request):
    """
    Receive a payment notification.

    Approved payments mark their sale as paid and trigger the booklet e-mail.
    Duplicate deliveries are no-ops.
    """
    try:
        body = await request.json()
    except ValueError:
        body = None

    notification = PaymentNotification.parse(body, request.query_params)

    # Resolved here rather than through Depends so a service that cannot be
    # built is still acknowledged with 200.
    try:
        service = resolve_sale_service(request.app)
    except Exception:
        logger.exception(
            "Sale service unavailable; payment notification dropped",
            extra={"payment_id": notification.payment_id},
        )
        return Response(status_code=200)

    outcome = await run_in_threadpool(service.handle_payment_notification, notification)
    logger.debug(
        "Webhook handled",
        extra={"payment_id": notification.payment_id, "outcome": outcome.value},
    )
    return Response(status_code=200)
