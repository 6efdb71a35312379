from .interface import (
    Bounded,
    Unbounded,
    PricingTier,
    LineItemRequest,
    TierPrice,
    PricedLineItem,
    CartTotal,
    TierDisplay,
)
from .errors import PricingError, InvalidInput, NoApplicableTier
from .engine import compute_tier_price, compute_cart_total
from .formatting import format_tiers
from .validation import validate_tier_set

__all__ = [
    "Bounded",
    "Unbounded",
    "PricingTier",
    "LineItemRequest",
    "TierPrice",
    "PricedLineItem",
    "CartTotal",
    "TierDisplay",
    "PricingError",
    "InvalidInput",
    "NoApplicableTier",
    "compute_tier_price",
    "compute_cart_total",
    "format_tiers",
    "validate_tier_set",
]
