"""
Fulfillment e-mail delivery.

Sends the purchased booklet (PDF) to the buyer over SMTP with SSL.

Delivery never raises: a missing attachment, missing SMTP credentials or an
SMTP failure is logged and reported through the return value, so the caller
can leave the sale marked as paid regardless.
"""

from __future__ import annotations

import html
import logging
import smtplib
from email.message import EmailMessage
from pathlib import Path
from typing import Optional

from domain.sale import Sale

logger = logging.getLogger(__name__)

SENDER_NAME: str = "Projeto NST TREINAMENTO"
SUBJECT: str = "Sua Apostila chegou! - Módulo I: Luto Mal Resolvido"
ATTACHMENT_FILENAME: str = "Apostila - Luto Mal Resolvido.pdf"


def render_apostila_email(name: str) -> str:
    """HTML body of the fulfillment e-mail."""

    return f"""
<div style="font-family: Arial, sans-serif; color: #333;">
    <h1 style="color: #0D1B2A;">Olá, {html.escape(name)}!</h1>
    <p>Obrigado por sua compra! Sua apostila do <strong>MÓDULO 1 - LUTO MAL RESOLVIDO</strong> está em anexo neste e-mail.</p>
    <p>Bons estudos!</p>
    <br>
    <p>Atenciosamente,</p>
    <p>Equipe NST TREINAMENTO</p>
</div>
"""


class SmtpNotificationSender:
    """Deliver the booklet through an SMTP relay (Gmail over SSL by default)."""

    def __init__(
        self,
        attachment_path: Path,
        user: Optional[str],
        password: Optional[str],
        host: str = "smtp.gmail.com",
        port: int = 465,
        smtp_factory=smtplib.SMTP_SSL,
    ) -> None:
        self._attachment_path = Path(attachment_path)
        self._user = user
        self._password = password
        self._host = host
        self._port = port
        self._smtp_factory = smtp_factory

    @property
    def configured(self) -> bool:
        return bool(self._user and self._password)

    def build_message(self, sale: Sale, attachment: bytes) -> EmailMessage:
        message = EmailMessage()
        message["From"] = f'"{SENDER_NAME}" <{self._user}>'
        message["To"] = sale.email
        message["Subject"] = SUBJECT
        message.set_content("Obrigado por sua compra! Sua apostila está em anexo neste e-mail.")
        message.add_alternative(render_apostila_email(sale.name), subtype="html")
        message.add_attachment(
            attachment,
            maintype="application",
            subtype="pdf",
            filename=ATTACHMENT_FILENAME,
        )
        return message

    def send_apostila(self, sale: Sale) -> bool:
        """
        E-mail the booklet to the buyer of `sale`.

        Returns:
            True if the message was handed to the SMTP relay, False otherwise
        """

        if not self.configured:
            logger.warning(
                "E-mail credentials not configured; skipping booklet delivery",
                extra={"sale_id": sale.id},
            )
            return False

        if not self._attachment_path.is_file():
            logger.error(
                "Booklet file not found on the server; skipping delivery",
                extra={"sale_id": sale.id, "attachment_path": str(self._attachment_path)},
            )
            return False

        try:
            attachment = self._attachment_path.read_bytes()
        except OSError:
            logger.exception(
                "Could not read booklet file; skipping delivery",
                extra={"sale_id": sale.id, "attachment_path": str(self._attachment_path)},
            )
            return False

        message = self.build_message(sale, attachment)

        try:
            with self._smtp_factory(self._host, self._port) as smtp:
                smtp.login(self._user, self._password)
                smtp.send_message(message)
        except (smtplib.SMTPException, OSError):
            logger.exception(
                "Failed to e-mail booklet",
                extra={"sale_id": sale.id, "email": sale.email},
            )
            return False

        logger.info("Booklet e-mailed", extra={"sale_id": sale.id, "email": sale.email})
        return True


__all__ = ["SmtpNotificationSender", "render_apostila_email"]
