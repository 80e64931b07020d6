"""Pytest configuration and fixtures for the payment endpoints."""

import hashlib
import hmac
import time
from typing import Any, Optional

import pytest
import pytest_asyncio
from aiohttp.test_utils import TestClient, TestServer

from paygate.config.settings import AppConfig
from paygate.payments.errors import WebhookVerificationError
from paygate.payments.provider import CheckoutSession, PaymentProvider, WebhookEvent
from paygate.payments.server import create_app

WEBHOOK_SECRET = "whsec_test_secret"
SESSION_URL = "https://checkout.stripe.com/c/pay/cs_test_123"

CONFIG_ENV_VARS = [
    "ENV",
    "STRIPE_RESTRICTED_KEY",
    "STRIPE_WEBHOOK_SECRET",
    "STRIPE_API_VERSION",
    "WEBHOOK_TOLERANCE_SECONDS",
    "BASE_URL",
    "BASE_URL_QUANT",
    "BASE_URL_CREDIT",
    "PRICE_ALLOWLIST",
    "DEFAULT_BRAND",
    "SERVER_HOST",
    "SERVER_PORT",
    "LOG_LEVEL",
]


class FakeProvider(PaymentProvider):
    """In-memory provider recording calls instead of talking to Stripe."""

    def __init__(
        self,
        url: str = SESSION_URL,
        error: Optional[Exception] = None,
        event: Optional[WebhookEvent] = None,
        verify_error: Optional[str] = None,
    ) -> None:
        self.url = url
        self.error = error
        self.event = event or WebhookEvent(id="evt_test_123", type="ping")
        self.verify_error = verify_error
        self.session_calls: list[dict[str, Any]] = []
        self.verify_calls: list[tuple[bytes, str]] = []

    async def create_checkout_session(self, params: dict[str, Any]) -> CheckoutSession:
        self.session_calls.append(params)
        if self.error is not None:
            raise self.error
        return CheckoutSession(id="cs_test_123", url=self.url)

    def construct_event(self, payload: bytes, sig_header: str) -> WebhookEvent:
        self.verify_calls.append((payload, sig_header))
        if self.verify_error is not None:
            raise WebhookVerificationError(self.verify_error)
        return self.event


def make_config(**overrides: Any) -> AppConfig:
    """Build a fully configured AppConfig, ignoring any .env file."""
    values: dict[str, Any] = {
        "stripe_restricted_key": "rk_test_123",
        "stripe_webhook_secret": WEBHOOK_SECRET,
        "base_url": "https://example.com",
        "base_url_quant": "https://quant.example.com",
        "base_url_credit": "https://credit.example.com",
    }
    values.update(overrides)
    return AppConfig(_env_file=None, **values)


def sign_payload(
    payload: bytes,
    secret: str = WEBHOOK_SECRET,
    timestamp: Optional[int] = None,
) -> str:
    """Build a Stripe-Signature header value for payload."""
    if timestamp is None:
        timestamp = int(time.time())
    signed = f"{timestamp}.".encode() + payload
    signature = hmac.new(secret.encode(), signed, hashlib.sha256).hexdigest()
    return f"t={timestamp},v1={signature}"


@pytest.fixture(autouse=True)
def clean_env(monkeypatch) -> None:
    """Keep the host environment out of AppConfig."""
    for var in CONFIG_ENV_VARS:
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def config() -> AppConfig:
    return make_config()


@pytest.fixture
def provider() -> FakeProvider:
    return FakeProvider()


@pytest_asyncio.fixture
async def client(config, provider):
    """Test client for an app wired to the fake provider."""
    async with TestClient(TestServer(create_app(config, provider))) as client:
        yield client
