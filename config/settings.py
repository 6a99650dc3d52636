"""
Application settings.

Everything is read from the environment. A `.env` file in the project root is
loaded first (python-dotenv) so local development needs no exported variables.

Environment variables:
- MERCADO_PAGO_TOKEN: Mercado Pago access token (server-side)
- PUBLIC_URL: public base URL the gateway calls back, e.g. https://loja.example.com
- EMAIL_USER / EMAIL_PASS: SMTP account used to deliver the booklet
- SMTP_HOST / SMTP_PORT: SMTP relay (defaults to Gmail over SSL)
- SUPABASE_URL / SUPABASE_KEY: Supabase project URL and server-side API key
- SALES_TABLE: Supabase table holding sales (default: vendas_apostila)
- APOSTILA_FILE_PATH: PDF attached to the fulfillment e-mail
- STATIC_DIR: directory with the landing page (apostila.html) and static assets
- PORT: HTTP listen port (default: 3001)
- LOG_LEVEL: root log level (default: INFO)
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from dotenv import load_dotenv

from services.errors import ConfigurationError

PROJECT_ROOT = Path(__file__).parent.parent


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


@dataclass(frozen=True, slots=True)
class Settings:
    mercado_pago_token: Optional[str] = None
    public_url: Optional[str] = None
    email_user: Optional[str] = None
    email_pass: Optional[str] = None
    smtp_host: str = "smtp.gmail.com"
    smtp_port: int = 465
    supabase_url: Optional[str] = None
    supabase_key: Optional[str] = None
    sales_table: str = "vendas_apostila"
    apostila_file_path: Path = PROJECT_ROOT / "apostila.pdf"
    static_dir: Path = PROJECT_ROOT / "static"
    port: int = 3001
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """Build settings from a mapping of environment variables (default: os.environ)."""

        env = os.environ if environ is None else environ
        public_url = _clean(env.get("PUBLIC_URL"))
        file_path = _clean(env.get("APOSTILA_FILE_PATH"))
        static_dir = _clean(env.get("STATIC_DIR"))

        return cls(
            mercado_pago_token=_clean(env.get("MERCADO_PAGO_TOKEN")),
            public_url=public_url.rstrip("/") if public_url else None,
            email_user=_clean(env.get("EMAIL_USER")),
            email_pass=_clean(env.get("EMAIL_PASS")),
            smtp_host=_clean(env.get("SMTP_HOST")) or "smtp.gmail.com",
            smtp_port=int(_clean(env.get("SMTP_PORT")) or 465),
            supabase_url=_clean(env.get("SUPABASE_URL")),
            supabase_key=_clean(env.get("SUPABASE_KEY")),
            sales_table=_clean(env.get("SALES_TABLE")) or "vendas_apostila",
            apostila_file_path=Path(file_path) if file_path else PROJECT_ROOT / "apostila.pdf",
            static_dir=Path(static_dir) if static_dir else PROJECT_ROOT / "static",
            port=int(_clean(env.get("PORT")) or 3001),
            log_level=(_clean(env.get("LOG_LEVEL")) or "INFO").upper(),
        )

    @property
    def payment_configured(self) -> bool:
        return bool(self.mercado_pago_token and self.public_url)

    @property
    def store_configured(self) -> bool:
        return bool(self.supabase_url and self.supabase_key)

    @property
    def email_configured(self) -> bool:
        return bool(self.email_user and self.email_pass)

    @property
    def notification_url(self) -> str:
        """Webhook URL handed to the gateway for asynchronous confirmation."""
        self.require_payment_config()
        return f"{self.public_url}/webhook-mp-apostila"

    def require_payment_config(self) -> None:
        missing = [
            name
            for name, value in (
                ("MERCADO_PAGO_TOKEN", self.mercado_pago_token),
                ("PUBLIC_URL", self.public_url),
            )
            if not value
        ]
        if missing:
            raise ConfigurationError(
                f"Missing environment variable(s): {', '.join(missing)}. "
                "Payment creation is disabled until they are set."
            )

    def require_store_config(self) -> None:
        missing = [
            name
            for name, value in (
                ("SUPABASE_URL", self.supabase_url),
                ("SUPABASE_KEY", self.supabase_key),
            )
            if not value
        ]
        if missing:
            raise ConfigurationError(
                f"Missing environment variable(s): {', '.join(missing)}. "
                "Set them to your Supabase project URL and API key."
            )


def load_settings(env_path: Optional[Path] = None) -> Settings:
    """Load `.env` (if present) and return settings from the environment."""

    load_dotenv(dotenv_path=env_path or PROJECT_ROOT / ".env")
    return Settings.from_env()


__all__ = ["Settings", "load_settings", "PROJECT_ROOT"]
