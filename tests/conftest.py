"""
Pytest configuration and shared fixtures.

Adds the project root to the Python path so tests can import domain,
repositories, services and api, and provides in-memory stand-ins for the
sale store, the payment gateway and the e-mail sender.
"""

import sys
from dataclasses import replace
from pathlib import Path
from typing import Dict, List, Optional

import pytest

# Add the project directory to the Python path
# so tests can import domain, repositories, etc.
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from config.settings import Settings  # noqa: E402
from domain.sale import Sale, SaleStatus  # noqa: E402
from services.errors import GatewayError, PersistenceError  # noqa: E402
from services.payment_gateway import PaymentDetails, PixPayment  # noqa: E402
from services.sale_service import SaleService  # noqa: E402


class FakeSaleRepository:
    """In-memory sale store with the same contract as SupabaseSaleRepository."""

    def __init__(self) -> None:
        self.rows: Dict[str, Sale] = {}
        self.fail_on: set[str] = set()
        self.mark_paid_calls: List[str] = []

    def _check(self, action: str) -> None:
        if action in self.fail_on:
            raise PersistenceError(f"Failed to {action}: simulated outage")

    def insert(self, sale: Sale) -> Sale:
        self._check("insert")
        sale.validate_for_insert()
        self.rows[sale.id] = sale
        return sale

    def get(self, sale_id: str) -> Optional[Sale]:
        self._check("get")
        return self.rows.get(sale_id)

    def set_payment_id(self, sale_id: str, payment_id: str) -> None:
        self._check("set_payment_id")
        sale = self.rows.get(sale_id)
        if sale is not None:
            self.rows[sale_id] = replace(sale, payment_id=payment_id)

    def mark_paid(self, sale_id: str) -> Optional[Sale]:
        self._check("mark_paid")
        self.mark_paid_calls.append(sale_id)
        sale = self.rows.get(sale_id)
        if sale is None or sale.is_paid:
            return None
        updated = replace(sale, status=SaleStatus.PAID)
        self.rows[sale_id] = updated
        return updated

    def set_whatsapp(self, sale_id: str, whatsapp: str) -> None:
        self._check("set_whatsapp")
        sale = self.rows.get(sale_id)
        if sale is not None:
            self.rows[sale_id] = replace(sale, whatsapp=whatsapp)

    def list_orphaned(self, limit: int = 1000) -> List[Sale]:
        return [s for s in self.rows.values() if s.payment_id is None and not s.is_paid][:limit]


class FakeGateway:
    """Records payment requests and answers with canned payments."""

    def __init__(self, repository: FakeSaleRepository) -> None:
        self.repository = repository
        self.created: List[dict] = []
        self.payments: Dict[str, PaymentDetails] = {}
        self.fail_create = False
        self.fail_get = False
        # Rows present in the store when each payment request was made
        self.rows_seen_at_create: List[Optional[Sale]] = []

    def create_pix_payment(self, **kwargs) -> PixPayment:
        self.rows_seen_at_create.append(self.repository.rows.get(kwargs["external_reference"]))
        self.created.append(kwargs)
        if self.fail_create:
            raise GatewayError("Mercado Pago answered 400")
        return PixPayment(
            payment_id="mp-1001",
            qr_code="00020126580014br.gov.bcb.pix",
            qr_code_base64="iVBORw0KGgo=",
        )

    def get_payment(self, payment_id: str) -> PaymentDetails:
        if self.fail_get:
            raise GatewayError("Mercado Pago request failed")
        return self.payments[payment_id]


class FakeNotifier:
    def __init__(self) -> None:
        self.sent: List[Sale] = []

    def send_apostila(self, sale: Sale) -> bool:
        self.sent.append(sale)
        return True


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        mercado_pago_token="TEST-token",
        public_url="https://loja.example.com",
        email_user="loja@example.com",
        email_pass="secret",
        supabase_url="https://project.supabase.co",
        supabase_key="service-key",
        apostila_file_path=tmp_path / "apostila.pdf",
        static_dir=tmp_path / "static",
    )


@pytest.fixture
def repository() -> FakeSaleRepository:
    return FakeSaleRepository()


@pytest.fixture
def gateway(repository) -> FakeGateway:
    return FakeGateway(repository)


@pytest.fixture
def notifier() -> FakeNotifier:
    return FakeNotifier()


@pytest.fixture
def service(settings, repository, gateway, notifier) -> SaleService:
    return SaleService(
        settings=settings,
        repository=repository,
        gateway=gateway,
        notifier=notifier,
    )


@pytest.fixture
def pending_sale(repository) -> Sale:
    sale = Sale(id="s1", name="Ana Souza", email="a@x.com", cpf="11122233344")
    repository.insert(sale)
    return sale
