"""Lightweight HTTP server for the checkout and webhook endpoints."""

import asyncio
import json
import logging
from collections.abc import Mapping
from typing import Any, Optional

from aiohttp import web

from paygate.config.settings import AppConfig
from paygate.payments.brands import build_allowlist
from paygate.payments.checkout import CheckoutRequest, create_checkout_url
from paygate.payments.errors import BadRequestError, PaymentRequestError
from paygate.payments.provider import PaymentProvider, StripeProvider
from paygate.payments.webhooks import handle_webhook

logger = logging.getLogger(__name__)

CONFIG_KEY = web.AppKey("config", AppConfig)
PROVIDER_KEY = web.AppKey("provider", PaymentProvider)
ALLOWLIST_KEY = web.AppKey("allowlist", Mapping)

CHECKOUT_SESSION_PATH = "/api/checkout-session"
BRAND_SESSION_PATH = "/api/create-session"
WEBHOOK_PATH = "/api/webhook"


async def _read_json_body(request: web.Request) -> Any:
    """Decode a JSON request body. An empty body decodes to {}."""
    raw = await request.read()
    if not raw.strip():
        return {}
    try:
        return json.loads(raw)
    except ValueError as e:
        raise BadRequestError("Invalid JSON body") from e


async def _checkout_endpoint(request: web.Request, brand_scoped: bool) -> web.Response:
    if request.method != "POST":
        return web.json_response({"error": "Method not allowed"}, status=405)

    allowlist = request.app[ALLOWLIST_KEY] if brand_scoped else None

    try:
        body = await _read_json_body(request)
        url = await create_checkout_url(
            CheckoutRequest.from_body(body),
            config=request.app[CONFIG_KEY],
            provider=request.app[PROVIDER_KEY],
            allowlist=allowlist,
        )
    except PaymentRequestError as e:
        return web.json_response({"error": e.message}, status=e.status)
    except Exception as e:
        logger.error(f"create-session error: {e}")
        return web.json_response({"error": "Failed to create session"}, status=500)

    return web.json_response({"url": url})


async def checkout_session_endpoint(request: web.Request) -> web.Response:
    """Handle POST /api/checkout-session (any price ID)."""
    return await _checkout_endpoint(request, brand_scoped=False)


async def brand_session_endpoint(request: web.Request) -> web.Response:
    """Handle POST /api/create-session (price ID checked against the brand allow-list)."""
    return await _checkout_endpoint(request, brand_scoped=True)


async def webhook_endpoint(request: web.Request) -> web.Response:
    """Handle POST /api/webhook.

    The body is read as raw bytes; signature verification needs the exact
    bytes Stripe sent.

    Args:
        request: aiohttp request

    Returns:
        aiohttp.web.Response
    """
    if request.method != "POST":
        return web.Response(status=405, text="Method Not Allowed")

    config = request.app[CONFIG_KEY]

    try:
        if not config.stripe_webhook_secret.get_secret_value():
            logger.error("Missing STRIPE_WEBHOOK_SECRET env")
            return web.Response(status=500, text="Webhook misconfigured")

        # Read raw payload
        payload = await request.read()
        sig_header = request.headers.get("Stripe-Signature", "")

        return await handle_webhook(payload, sig_header, request.app[PROVIDER_KEY])
    except Exception as e:
        logger.exception(f"webhook handler error: {e}")
        return web.Response(status=500, text="Internal Server Error")


def create_app(
    config: AppConfig,
    provider: Optional[PaymentProvider] = None,
) -> web.Application:
    """Create aiohttp application with checkout and webhook routes.

    Routes accept every method so each handler can answer non-POST
    requests with its own 405 body.

    Args:
        config: Application configuration
        provider: Payment provider; defaults to StripeProvider(config)

    Returns:
        Configured aiohttp Application
    """
    app = web.Application()
    app[CONFIG_KEY] = config
    app[PROVIDER_KEY] = provider if provider is not None else StripeProvider(config)
    app[ALLOWLIST_KEY] = build_allowlist(config.price_allowlist)

    app.router.add_route("*", CHECKOUT_SESSION_PATH, checkout_session_endpoint)
    app.router.add_route("*", BRAND_SESSION_PATH, brand_session_endpoint)
    app.router.add_route("*", WEBHOOK_PATH, webhook_endpoint)

    return app


async def run_server(
    config: AppConfig,
    shutdown_event: Optional[asyncio.Event] = None,
) -> None:
    """Run the HTTP server until shutdown signal.

    Args:
        config: Application configuration
        shutdown_event: Optional event to signal shutdown
    """
    app = create_app(config)

    runner = web.AppRunner(app)
    await runner.setup()

    site = web.TCPSite(runner, config.server_host, config.server_port)
    await site.start()

    logger.info(f"Server listening on {config.server_host}:{config.server_port}")

    # Wait for shutdown signal
    if shutdown_event:
        await shutdown_event.wait()
    else:
        await asyncio.Event().wait()

    logger.info("Shutting down server...")
    await runner.cleanup()
