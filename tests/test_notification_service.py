"""
Tests for `services/notification_service.py`.

SMTP is replaced by a MagicMock factory; no network is used.
"""

from __future__ import annotations

import smtplib
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from domain.sale import Sale
from services.notification_service import ATTACHMENT_FILENAME, SmtpNotificationSender

SALE = Sale(id="s1", name="Ana <Souza>", email="a@x.com", cpf="11122233344")


@pytest.fixture
def pdf(tmp_path):
    path = tmp_path / "apostila.pdf"
    path.write_bytes(b"%PDF-1.4 booklet")
    return path


def _sender(attachment_path, user="loja@example.com", password="secret"):
    smtp = MagicMock()
    factory = MagicMock()
    factory.return_value.__enter__.return_value = smtp
    sender = SmtpNotificationSender(
        attachment_path=attachment_path,
        user=user,
        password=password,
        smtp_factory=factory,
    )
    return sender, factory, smtp


def test_send_apostila_delivers_pdf(pdf) -> None:
    sender, factory, smtp = _sender(pdf)

    assert sender.send_apostila(SALE) is True

    factory.assert_called_once_with("smtp.gmail.com", 465)
    smtp.login.assert_called_once_with("loja@example.com", "secret")
    message = smtp.send_message.call_args.args[0]
    assert message["To"] == "a@x.com"
    assert "Luto Mal Resolvido" in message["Subject"]

    [attachment] = list(message.iter_attachments())
    assert attachment.get_filename() == ATTACHMENT_FILENAME
    assert attachment.get_content() == b"%PDF-1.4 booklet"

    html_part = message.get_body(preferencelist=("html",))
    assert "Ana &lt;Souza&gt;" in html_part.get_content()


def test_missing_attachment_skips_send(tmp_path) -> None:
    sender, factory, _ = _sender(tmp_path / "missing.pdf")

    assert sender.send_apostila(SALE) is False
    factory.assert_not_called()


def test_missing_credentials_skips_send(pdf) -> None:
    sender, factory, _ = _sender(pdf, user=None, password=None)

    assert sender.configured is False
    assert sender.send_apostila(SALE) is False
    factory.assert_not_called()


def test_smtp_failure_is_logged_not_raised(pdf) -> None:
    sender, _, smtp = _sender(pdf)
    smtp.login.side_effect = smtplib.SMTPAuthenticationError(535, b"bad credentials")

    assert sender.send_apostila(SALE) is False


def test_unreadable_attachment_is_logged_not_raised(pdf, monkeypatch) -> None:
    sender, factory, _ = _sender(pdf)

    def deny(self):
        raise PermissionError(13, "Permission denied", str(self))

    monkeypatch.setattr(Path, "read_bytes", deny)

    assert sender.send_apostila(SALE) is False
    factory.assert_not_called()
