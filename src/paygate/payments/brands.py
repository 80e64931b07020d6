"""Brand allow-lists and per-brand base URL resolution."""

from collections.abc import Iterable, Mapping
from enum import Enum
from types import MappingProxyType

from paygate.config.settings import AppConfig


class Brand(str, Enum):
    """Product lines served by the brand-scoped checkout endpoint."""

    QUANT = "quant"
    CREDIT = "credit"


PriceAllowlist = Mapping[str, frozenset[str]]


def build_allowlist(raw: Mapping[str, Iterable[str]]) -> PriceAllowlist:
    """Freeze a brand -> price IDs mapping.

    Args:
        raw: Mapping of brand name to permitted Stripe price IDs

    Returns:
        Read-only mapping of brand name to frozenset of price IDs
    """
    return MappingProxyType({brand: frozenset(prices) for brand, prices in raw.items()})


def is_price_allowed(allowlist: PriceAllowlist, brand: str, price_id: str) -> bool:
    """Check that price_id is permitted for brand. Unknown brands permit nothing."""
    return price_id in allowlist.get(brand, frozenset())


def resolve_base_url(config: AppConfig, brand: str) -> str | None:
    """Pick the redirect base URL for a brand.

    credit and quant map to their own base URLs; any other brand falls
    back to the generic base URL.

    Returns:
        Base URL, or None if nothing is configured for the brand
    """
    if brand == Brand.CREDIT.value:
        url = config.base_url_credit
    elif brand == Brand.QUANT.value:
        url = config.base_url_quant
    else:
        url = config.base_url
    return url or None
