"""Stripe webhook handler and event processing."""

import logging
from collections.abc import Awaitable, Callable
from typing import Any

from aiohttp import web

from paygate.payments.errors import WebhookVerificationError
from paygate.payments.provider import PaymentProvider

logger = logging.getLogger(__name__)

EventHandler = Callable[[dict[str, Any]], Awaitable[None]]


async def handle_webhook(
    payload: bytes,
    sig_header: str,
    provider: PaymentProvider,
) -> web.Response:
    """Handle and verify Stripe webhook events.

    Verifies the webhook signature against the raw payload, routes the
    event to its handler and acknowledges it. Every verified event gets
    a 200, handled or not, so Stripe does not redeliver it. There is no
    dedup: a replayed event is processed again.

    Args:
        payload: Raw webhook payload bytes
        sig_header: Stripe-Signature header value
        provider: Payment provider used for verification

    Returns:
        aiohttp.web.Response (200 on success, 400 on verification failure,
        500 if a handler fails)
    """
    if not sig_header:
        logger.error("Missing Stripe-Signature header")
        return web.Response(status=400, text="Webhook Error: Missing Stripe-Signature header")

    # Verify webhook signature
    try:
        event = provider.construct_event(payload, sig_header)
    except WebhookVerificationError as e:
        logger.error(f"Webhook signature verification failed: {e}")
        return web.Response(status=400, text=f"Webhook Error: {e}")

    logger.info(f"Received webhook: {event.type} ({event.id})")

    # Route event to handler
    try:
        handler = EVENT_HANDLERS.get(event.type)
        if handler is None:
            logger.info(f"Unhandled event type: {event.type}")
        else:
            await handler(event.data_object)
    except Exception as e:
        logger.exception(f"Error processing webhook {event.type}: {e}")
        return web.Response(status=500, text="Internal Server Error")

    return web.json_response({"received": True})


async def _handle_checkout_completed(session: dict[str, Any]) -> None:
    """Handle checkout.session.completed.

    Placeholder: access provisioning hooks in here.
    """
    logger.info(
        f"Checkout session {session.get('id')} completed "
        f"(customer={session.get('customer')}, subscription={session.get('subscription')})"
    )


async def _handle_subscription_created(subscription: dict[str, Any]) -> None:
    """Handle customer.subscription.created. Placeholder."""
    logger.info(
        f"Subscription {subscription.get('id')} created "
        f"(customer={subscription.get('customer')}, status={subscription.get('status')})"
    )


async def _handle_invoice_paid(invoice: dict[str, Any]) -> None:
    """Handle invoice.paid. Placeholder."""
    logger.info(
        f"Invoice {invoice.get('id')} paid "
        f"(customer={invoice.get('customer')}, subscription={invoice.get('subscription')})"
    )


EVENT_HANDLERS: dict[str, EventHandler] = {
    "checkout.session.completed": _handle_checkout_completed,
    "customer.subscription.created": _handle_subscription_created,
    "invoice.paid": _handle_invoice_paid,
}
