"""
Sales API Endpoints.

Endpoints the landing page calls: start a Pix purchase, poll its status and
leave a WhatsApp number.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from api.dependencies import get_sale_service
from api.models import (
    CreatePaymentRequest,
    CreatePaymentResponse,
    ErrorResponse,
    SaveWhatsappRequest,
    SaveWhatsappResponse,
    StatusResponse,
)
from services.errors import GatewayError, InvalidRequest, NotFound, PersistenceError, SaleError
from services.sale_service import SaleService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/create-payment-apostila",
    response_model=CreatePaymentResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
    summary="Create Pix Payment",
    description="Register a sale and create its Pix payment on Mercado Pago."
)
def create_payment(
    request: CreatePaymentRequest,
    service: SaleService = Depends(get_sale_service),
):
    """
    Start a booklet purchase.

    **Process:**
    1. Validates configuration and the buyer fields
    2. Stores the sale as pending
    3. Requests a Pix payment (idempotency key = sale id)
    4. Returns the Pix code and QR image for the buyer to pay

    **Example request:**
    ```json
    {"fullName": "Ana Souza", "email": "a@x.com", "cpf": "111.222.333-44"}
    ```

    **Success response:**
    ```json
    {"saleId": "apostila_...", "qrCodeText": "000201...", "qrCodeBase64": "iVBOR..."}
    ```
    """
    try:
        instructions = service.create_payment(request.full_name, request.email, request.cpf)
    except InvalidRequest as e:
        return JSONResponse(status_code=400, content={"error": e.message})
    except PersistenceError as e:
        logger.error("Failed to register sale", extra={"error": e.message})
        return JSONResponse(status_code=500, content={"error": "Falha ao registrar a venda."})
    except GatewayError as e:
        logger.error("Failed to create payment", extra={"error": e.message})
        return JSONResponse(status_code=500, content={"error": "Não foi possível criar o pagamento."})
    except SaleError as e:
        logger.error("Payment creation unavailable", extra={"error": e.message})
        return JSONResponse(
            status_code=e.status_code,
            content={"error": "O servidor não está configurado corretamente."},
        )

    return CreatePaymentResponse(
        sale_id=instructions.sale_id,
        qr_code_text=instructions.qr_code_text,
        qr_code_base64=instructions.qr_code_base64,
    )


@router.get(
    "/check-status",
    response_model=StatusResponse,
    responses={404: {"model": ErrorResponse}},
    summary="Check Sale Status",
)
def check_status(
    sale_id: Optional[str] = Query(None, alias="saleId"),
    service: SaleService = Depends(get_sale_service),
):
    """
    Current status of a sale (`pending` or `paid`).

    Polled by the landing page while the buyer pays.
    """
    try:
        status = service.get_status(sale_id)
    except NotFound:
        return JSONResponse(status_code=404, content={"error": "Venda não encontrada."})
    except SaleError as e:
        logger.error("Status check unavailable", extra={"error": e.message})
        return JSONResponse(status_code=e.status_code, content={"error": "Venda não encontrada."})

    return StatusResponse(status=status.value)


@router.post(
    "/save-whatsapp",
    response_model=SaveWhatsappResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": SaveWhatsappResponse}},
    summary="Save WhatsApp Number",
)
def save_whatsapp(
    request: SaveWhatsappRequest,
    service: SaleService = Depends(get_sale_service),
):
    """
    Attach a WhatsApp number to a sale.

    The sale is not looked up first; an unknown id is accepted silently.
    """
    try:
        service.save_whatsapp(request.sale_id, request.whatsapp)
    except InvalidRequest:
        return JSONResponse(status_code=400, content={"error": "Dados incompletos."})
    except SaleError as e:
        logger.error("Failed to save WhatsApp", extra={"sale_id": request.sale_id, "error": e.message})
        return JSONResponse(
            status_code=e.status_code,
            content={"success": False, "message": "Não foi possível salvar o número."},
        )

    return SaveWhatsappResponse(success=True, message="Número salvo com sucesso!")
