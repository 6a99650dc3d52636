"""
API Request and Response Models.

Pydantic models for validating API requests and serializing responses.

Field names on the wire are camelCase (the landing page's contract). Request
fields are optional at the schema level so that a missing value is reported
by the service as a 400 rather than by FastAPI as a 422.
"""

from typing import Optional

from pydantic import BaseModel, Field


# ============================================================================
# Payment Models
# ============================================================================

class CreatePaymentRequest(BaseModel):
    """Checkout form submitted by the buyer."""
    full_name: Optional[str] = Field(None, alias="fullName")
    email: Optional[str] = None
    cpf: Optional[str] = None

    class Config:
        populate_by_name = True
        json_schema_extra = {
            "example": {
                "fullName": "Ana Souza",
                "email": "ana@example.com",
                "cpf": "111.222.333-44"
            }
        }


class CreatePaymentResponse(BaseModel):
    """Pix payment instructions for a new sale."""
    sale_id: str = Field(..., alias="saleId")
    qr_code_text: str = Field(..., alias="qrCodeText")
    qr_code_base64: str = Field(..., alias="qrCodeBase64")

    class Config:
        populate_by_name = True
        json_schema_extra = {
            "example": {
                "saleId": "apostila_3f2b6c1d9e8a4b7c8d9e0f1a2b3c4d5e",
                "qrCodeText": "00020126580014br.gov.bcb.pix...",
                "qrCodeBase64": "iVBORw0KGgoAAAANSUhEUgAA..."
            }
        }


class StatusResponse(BaseModel):
    """Current payment status of a sale."""
    status: str

    class Config:
        json_schema_extra = {
            "example": {
                "status": "paid"
            }
        }


# ============================================================================
# Contact Models
# ============================================================================

class SaveWhatsappRequest(BaseModel):
    """WhatsApp number captured after checkout."""
    sale_id: Optional[str] = Field(None, alias="saleId")
    whatsapp: Optional[str] = None

    class Config:
        populate_by_name = True
        json_schema_extra = {
            "example": {
                "saleId": "apostila_3f2b6c1d9e8a4b7c8d9e0f1a2b3c4d5e",
                "whatsapp": "+55 11 91234-5678"
            }
        }


class SaveWhatsappResponse(BaseModel):
    """Result of saving a WhatsApp number."""
    success: bool
    message: str


# ============================================================================
# Error Models
# ============================================================================

class ErrorResponse(BaseModel):
    """Standard error response."""
    error: str

    class Config:
        json_schema_extra = {
            "example": {
                "error": "Venda não encontrada."
            }
        }
