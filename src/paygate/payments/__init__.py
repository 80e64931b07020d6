"""Stripe subscription checkout and webhook processing.

Handles checkout session creation (generic and brand-scoped) and
verification and dispatch of inbound webhook events.
"""

from paygate.payments.checkout import create_checkout_url
from paygate.payments.server import create_app
from paygate.payments.webhooks import handle_webhook

__all__ = [
    "create_app",
    "create_checkout_url",
    "handle_webhook",
]
