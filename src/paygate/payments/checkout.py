"""Stripe Checkout session creation for subscription signup."""

import logging
from dataclasses import dataclass
from typing import Any, Optional

from paygate.config.settings import AppConfig
from paygate.payments.brands import PriceAllowlist, is_price_allowed, resolve_base_url
from paygate.payments.errors import BadRequestError, MisconfiguredError
from paygate.payments.provider import PaymentProvider

logger = logging.getLogger(__name__)

# Stripe substitutes the session id into this placeholder on redirect
SUCCESS_PATH = "/checkout/success?session_id={CHECKOUT_SESSION_ID}"
CANCEL_PATH = "/pricing"


@dataclass(frozen=True)
class CheckoutRequest:
    """Checkout request parsed from a JSON body."""

    price_id: Optional[str]
    brand: Optional[str] = None
    quantity: int = 1
    customer_email: Optional[str] = None
    success_url: Optional[str] = None
    cancel_url: Optional[str] = None

    @classmethod
    def from_body(cls, body: Any) -> "CheckoutRequest":
        """Build a request from a decoded JSON body.

        Non-object bodies are treated as empty. priceId presence is checked
        later by create_checkout_url so both endpoints report it the same way.

        Raises:
            BadRequestError: If a field has the wrong type or quantity is invalid
        """
        if not isinstance(body, dict):
            body = {}

        price_id = body.get("priceId")
        if not isinstance(price_id, str):
            # false, 0 and null count as missing
            if price_id:
                raise BadRequestError("Invalid priceId")
            price_id = None

        # An explicit brand, even "", is never replaced by the default
        brand = body.get("brand")
        if "brand" in body and not isinstance(brand, str):
            raise BadRequestError("Invalid brand")

        return cls(
            price_id=price_id,
            brand=brand,
            quantity=_coerce_quantity(body.get("quantity")),
            customer_email=_optional_str(body, "customerEmail"),
            success_url=_optional_str(body, "successUrl"),
            cancel_url=_optional_str(body, "cancelUrl"),
        )


def _optional_str(body: dict, key: str) -> Optional[str]:
    value = body.get(key)
    if value is None or value == "":
        return None
    if not isinstance(value, str):
        raise BadRequestError(f"Invalid {key}")
    return value


def _coerce_quantity(value: Any) -> int:
    """Coerce quantity to a positive int. Missing means 1."""
    if value is None:
        return 1
    if isinstance(value, bool):
        raise BadRequestError("Invalid quantity")

    if isinstance(value, int):
        quantity = value
    elif isinstance(value, float) and value.is_integer():
        quantity = int(value)
    elif isinstance(value, str) and value.strip().isdigit():
        quantity = int(value.strip())
    else:
        raise BadRequestError("Invalid quantity")

    if quantity < 1:
        raise BadRequestError("Invalid quantity")
    return quantity


def build_session_params(request: CheckoutRequest, base_url: str) -> dict[str, Any]:
    """Build Stripe Checkout Session parameters for a subscription.

    Args:
        request: Parsed checkout request (price_id must be set)
        base_url: Site base URL used for default redirect URLs

    Returns:
        Keyword arguments for stripe.checkout.Session.create
    """
    params: dict[str, Any] = {
        "mode": "subscription",
        "line_items": [
            {
                "price": request.price_id,
                "quantity": request.quantity,
            }
        ],
        "success_url": request.success_url or f"{base_url}{SUCCESS_PATH}",
        "cancel_url": request.cancel_url or f"{base_url}{CANCEL_PATH}",
        "allow_promotion_codes": True,
        "automatic_tax": {"enabled": False},
    }
    if request.customer_email:
        params["customer_email"] = request.customer_email
    return params


async def create_checkout_url(
    request: CheckoutRequest,
    config: AppConfig,
    provider: PaymentProvider,
    allowlist: Optional[PriceAllowlist] = None,
) -> str:
    """Create a Stripe Checkout Session and return its hosted page URL.

    With an allowlist the request is brand-scoped: the price must be
    permitted for the resolved brand and the base URL is chosen per brand.
    Without one any price is accepted and the generic base URL is used.

    Args:
        request: Parsed checkout request
        config: Application configuration
        provider: Payment provider used for the remote call
        allowlist: Brand allow-list, or None for the generic endpoint

    Returns:
        Checkout Session URL

    Raises:
        BadRequestError: Missing priceId or price not allowed for brand
        MisconfiguredError: Base URL or API key not configured
        Exception: Provider errors, unchanged
    """
    if not request.price_id:
        raise BadRequestError("Missing priceId")

    if allowlist is not None:
        brand = request.brand if request.brand is not None else config.default_brand
        if not is_price_allowed(allowlist, brand, request.price_id):
            logger.warning(f"Rejected price {request.price_id} for brand {brand}")
            raise BadRequestError(f"Invalid priceId for brand {brand}")

        base_url = resolve_base_url(config, brand)
        if not base_url:
            logger.error(f"No base URL configured for brand {brand}")
            raise MisconfiguredError("Missing BASE_URL env for brand")
    else:
        base_url = config.base_url
        if not base_url:
            logger.error("BASE_URL not configured")
            raise MisconfiguredError("Missing BASE_URL env")

    if not config.stripe_restricted_key.get_secret_value():
        logger.error("STRIPE_RESTRICTED_KEY not configured")
        raise MisconfiguredError("Missing STRIPE_RESTRICTED_KEY env")

    session = await provider.create_checkout_session(
        build_session_params(request, base_url)
    )

    logger.info(f"Created checkout session {session.id} for price {request.price_id}")

    return session.url
