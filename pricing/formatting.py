from decimal import Decimal
from typing import List, Sequence

from pricing.interface import PricingTier, TierDisplay

BASE_PRICE_LABEL = "Base price"


def _format_percentage(value: float) -> str:
    return f"{Decimal(str(value)).normalize():f}"


def format_tiers(tiers: Sequence[PricingTier]) -> List[TierDisplay]:
    """
    Projeta as faixas para exibição, preservando a ordem recebida.

    Não decide preço: para resolver a faixa de uma quantidade use compute_tier_price.
    """
    formatted = []
    for tier in tiers:
        if tier.is_unbounded:
            range_label = f"{tier.min_quantity}+ units"
        else:
            range_label = f"{tier.min_quantity}-{tier.max_quantity.max} units"

        if tier.discount_percentage:
            discount = f"{_format_percentage(tier.discount_percentage)}% off"
        else:
            discount = BASE_PRICE_LABEL

        formatted.append(TierDisplay(
            range=range_label,
            price=f"${tier.unit_price:.2f}",
            discount=discount,
            unit_price=float(tier.unit_price),
        ))

    return formatted
