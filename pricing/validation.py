from typing import Sequence

from pricing.engine import sort_tiers
from pricing.errors import InvalidInput
from pricing.interface import Bounded, PricingTier


def validate_tier_set(tiers: Sequence[PricingTier]) -> None:
    """
    Valida um conjunto de faixas na entrada do catálogo.

    Regras:
    - faixas não podem se sobrepor (apenas a última pode ser ilimitada)
    - preço unitário não pode subir com a quantidade, senão a economia fica negativa

    Lacunas entre faixas não são rejeitadas aqui; aparecem como NoApplicableTier na precificação.

    Raises:
        InvalidInput: Conjunto inconsistente
    """
    ordered = sort_tiers(tiers)

    for previous, current in zip(ordered, ordered[1:]):
        upper = previous.max_quantity
        if not isinstance(upper, Bounded) or upper.max >= current.min_quantity:
            raise InvalidInput(
                f"Faixas sobrepostas: {previous.min_quantity}-"
                f"{upper.max if isinstance(upper, Bounded) else '∞'} e "
                f"{current.min_quantity}+"
            )

        if current.unit_price > previous.unit_price:
            raise InvalidInput(
                f"Preço unitário da faixa {current.min_quantity}+ ({current.unit_price}) "
                f"maior que o da faixa anterior ({previous.unit_price})"
            )
