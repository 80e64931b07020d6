"""Payment provider interface and the Stripe implementation."""

import asyncio
import json
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

import stripe

from paygate.config.settings import AppConfig
from paygate.payments.errors import WebhookVerificationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CheckoutSession:
    """Hosted checkout session returned by the provider."""

    id: str
    url: str


@dataclass(frozen=True)
class WebhookEvent:
    """Verified webhook event. Only type and data.object are inspected."""

    id: str
    type: str
    data_object: dict[str, Any] = field(default_factory=dict)


class PaymentProvider(ABC):
    """Abstract payment provider interface."""

    @abstractmethod
    async def create_checkout_session(self, params: dict[str, Any]) -> CheckoutSession:
        """
        Create a hosted checkout session.

        Args:
            params: Session parameters (mode, line_items, redirect URLs, ...)

        Returns:
            CheckoutSession with the redirect URL

        Raises:
            Exception: Any provider or network failure, unchanged
        """
        pass

    @abstractmethod
    def construct_event(self, payload: bytes, sig_header: str) -> WebhookEvent:
        """
        Verify a webhook signature and parse the event.

        Args:
            payload: Raw request body, exactly as received
            sig_header: Signature header value

        Returns:
            WebhookEvent

        Raises:
            WebhookVerificationError: If the signature or payload is invalid
        """
        pass


class StripeProvider(PaymentProvider):
    """Stripe-backed provider.

    Credentials are passed per call rather than through the module-level
    stripe.api_key.
    """

    def __init__(self, config: AppConfig) -> None:
        self._api_key = config.stripe_restricted_key.get_secret_value()
        self._api_version = config.stripe_api_version
        self._webhook_secret = config.stripe_webhook_secret.get_secret_value()
        self._tolerance = config.webhook_tolerance_seconds

    async def create_checkout_session(self, params: dict[str, Any]) -> CheckoutSession:
        # stripe-python calls block
        session = await asyncio.to_thread(
            stripe.checkout.Session.create,
            api_key=self._api_key,
            stripe_version=self._api_version,
            **params,
        )
        return CheckoutSession(id=session.id, url=session.url)

    def construct_event(self, payload: bytes, sig_header: str) -> WebhookEvent:
        try:
            body = payload.decode("utf-8")
        except UnicodeDecodeError as e:
            raise WebhookVerificationError(f"Invalid payload: {e}") from e

        try:
            stripe.WebhookSignature.verify_header(
                body,
                sig_header,
                self._webhook_secret,
                tolerance=self._tolerance,
            )
        except stripe.SignatureVerificationError as e:
            raise WebhookVerificationError(str(e)) from e

        # Handlers get plain dicts, not StripeObjects
        try:
            event = json.loads(body)
        except ValueError as e:
            raise WebhookVerificationError(f"Invalid payload: {e}") from e
        if not isinstance(event, dict):
            raise WebhookVerificationError("Invalid payload: event is not a JSON object")

        data = event.get("data")
        data_object = data.get("object") if isinstance(data, dict) else None
        return WebhookEvent(
            id=str(event.get("id") or ""),
            type=str(event.get("type") or ""),
            data_object=data_object if isinstance(data_object, dict) else {},
        )
