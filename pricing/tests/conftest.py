import os
import tempfile

import pytest

# Banco SQLite isolado; precisa estar definido antes de importar config/database
_DB_DIR = tempfile.mkdtemp(prefix="bulk-store-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_DB_DIR, 'test.db')}"
os.environ.setdefault("PAYMENT_SECRET_KEY", "sk_test_fake")

from pricing import PricingTier  # noqa: E402
from payment_service import PaymentIntent, PaymentServiceError  # noqa: E402


SAMPLE_TIER_ROWS = [
    (1, 1, 10, "10.00", 0),
    (2, 11, 50, "8.50", 15),
    (3, 51, 100, "7.00", 30),
    (4, 101, None, "6.00", 40),
]


@pytest.fixture
def sample_tiers():
    """Faixas de referência: 1-10 @10.00, 11-50 @8.50, 51-100 @7.00, 101+ @6.00"""
    return [PricingTier.from_row(*row) for row in SAMPLE_TIER_ROWS]


@pytest.fixture
def sample_tiers_payload():
    return [
        {
            "min_quantity": min_q,
            "max_quantity": max_q,
            "unit_price": price,
            "discount_percentage": discount,
        }
        for _, min_q, max_q, price, discount in SAMPLE_TIER_ROWS
    ]


class FakePaymentGateway:
    """Substitui o PaymentGateway nos testes de endpoint"""

    def __init__(self):
        self.calls = []
        self.error = None

    async def create_payment_intent(self, amount, currency, metadata=None):
        self.calls.append({"amount": amount, "currency": currency, "metadata": metadata})
        if self.error:
            raise self.error
        intent_id = f"pi_test_{len(self.calls)}"
        return PaymentIntent(
            id=intent_id,
            client_secret=f"{intent_id}_secret",
            amount=amount,
            currency=currency,
            status="requires_payment_method",
        )


@pytest.fixture
def payment_gateway():
    return FakePaymentGateway()


@pytest.fixture
def failing_payment_gateway(payment_gateway):
    payment_gateway.error = PaymentServiceError("card_declined")
    return payment_gateway


@pytest.fixture
def client(payment_gateway):
    from fastapi.testclient import TestClient

    from app import app, get_payment_gateway
    from database import Base, engine

    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)

    app.dependency_overrides[get_payment_gateway] = lambda: payment_gateway
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
