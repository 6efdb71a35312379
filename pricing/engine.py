"""
Motor de precificação por volume.

Funções puras: não fazem I/O, não registram log e não guardam estado.
Toda falha é levantada como PricingError e propagada sem tratamento.
"""
from decimal import Decimal, ROUND_HALF_UP
from typing import List, Optional, Sequence

from pricing.errors import InvalidInput, NoApplicableTier
from pricing.interface import CartTotal, LineItemRequest, PricedLineItem, PricingTier, TierPrice

CENTS = Decimal("0.01")


def round_currency(value: Decimal) -> Decimal:
    """Arredonda para 2 casas (meio para cima)"""
    return value.quantize(CENTS, rounding=ROUND_HALF_UP)


def sort_tiers(tiers: Sequence[PricingTier]) -> List[PricingTier]:
    return sorted(tiers, key=lambda tier: tier.min_quantity)


def compute_tier_price(quantity: int, tiers: Optional[Sequence[PricingTier]]) -> TierPrice:
    """
    Resolve a faixa aplicável a uma quantidade e calcula o preço da linha.

    Args:
        quantity: Quantidade solicitada
        tiers: Faixas do produto (qualquer ordem)

    Returns:
        TierPrice com unit_price, subtotal, savings, discount_percentage e tier_id

    Raises:
        InvalidInput: Nenhuma faixa informada
        NoApplicableTier: Quantidade fora de todas as faixas
    """
    if not tiers:
        raise InvalidInput("Nenhuma faixa de preço disponível")

    sorted_tiers = sort_tiers(tiers)

    applicable = next((tier for tier in sorted_tiers if tier.contains(quantity)), None)
    if applicable is None:
        raise NoApplicableTier(quantity)

    # Economia sempre relativa à faixa base (menor min_quantity)
    base_unit_price = sorted_tiers[0].unit_price
    unit_price = applicable.unit_price

    subtotal = quantity * unit_price
    savings = quantity * (base_unit_price - unit_price)

    return TierPrice(
        quantity=quantity,
        unit_price=unit_price,
        subtotal=round_currency(subtotal),
        savings=round_currency(savings),
        discount_percentage=applicable.discount_percentage,
        tier_id=applicable.id,
    )


def compute_cart_total(line_items: Sequence[LineItemRequest]) -> CartTotal:
    """
    Precifica cada item do carrinho e agrega os totais.

    Qualquer item sem faixa aplicável aborta o carrinho inteiro.
    """
    total = Decimal("0")
    total_savings = Decimal("0")
    items: List[PricedLineItem] = []

    for item in line_items:
        pricing = compute_tier_price(item.quantity, item.tiers)
        total += pricing.subtotal
        total_savings += pricing.savings

        items.append(PricedLineItem(
            product_id=item.product_id,
            product_name=item.product_name,
            **pricing.model_dump(),
        ))

    return CartTotal(
        items=items,
        total=round_currency(total),
        total_savings=round_currency(total_savings),
        item_count=len(line_items),
    )
