from decimal import Decimal
from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, PlainSerializer, model_validator


# Valores monetários trafegam como Decimal e saem no JSON como número
Money = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


class Bounded(BaseModel):
    """Limite superior fechado de uma faixa"""
    model_config = ConfigDict(frozen=True)

    kind: Literal["bounded"] = "bounded"
    max: int = Field(..., ge=0)

    def admits(self, quantity: int) -> bool:
        return quantity <= self.max


class Unbounded(BaseModel):
    """Faixa sem limite superior (ex: 101+ unidades)"""
    model_config = ConfigDict(frozen=True)

    kind: Literal["unbounded"] = "unbounded"

    def admits(self, quantity: int) -> bool:
        return True


UpperBound = Annotated[Union[Bounded, Unbounded], Field(discriminator="kind")]


class PricingTier(BaseModel):
    """Faixa de preço por volume de um produto (dado de referência, imutável)"""
    model_config = ConfigDict(frozen=True)

    id: Optional[int] = None
    min_quantity: int = Field(..., ge=0)
    max_quantity: UpperBound = Field(default_factory=Unbounded)
    unit_price: Money = Field(..., ge=0)
    discount_percentage: float = Field(0.0, ge=0)

    @model_validator(mode="after")
    def _check_range(self) -> "PricingTier":
        if isinstance(self.max_quantity, Bounded) and self.max_quantity.max < self.min_quantity:
            raise ValueError(
                f"max_quantity ({self.max_quantity.max}) menor que min_quantity ({self.min_quantity})"
            )
        return self

    @property
    def is_unbounded(self) -> bool:
        return isinstance(self.max_quantity, Unbounded)

    def contains(self, quantity: int) -> bool:
        return quantity >= self.min_quantity and self.max_quantity.admits(quantity)

    @classmethod
    def from_row(
            cls,
            id: Optional[int],
            min_quantity: int,
            max_quantity: Optional[int],
            unit_price,
            discount_percentage=None,
    ) -> "PricingTier":
        """
        Constrói uma faixa a partir de uma linha do banco.

        max_quantity None significa faixa sem limite superior.
        """
        upper = Unbounded() if max_quantity is None else Bounded(max=max_quantity)
        return cls(
            id=id,
            min_quantity=min_quantity,
            max_quantity=upper,
            unit_price=Decimal(str(unit_price)),
            discount_percentage=float(discount_percentage or 0),
        )


class LineItemRequest(BaseModel):
    """Item de carrinho pronto para precificação (produto já resolvido no catálogo)"""
    product_id: int
    product_name: str
    quantity: int = Field(..., ge=1)
    tiers: List[PricingTier] = Field(default_factory=list)


class TierPrice(BaseModel):
    """Resultado da resolução de faixa para uma quantidade"""
    quantity: int
    unit_price: Money
    subtotal: Money
    savings: Money
    discount_percentage: float
    tier_id: Optional[int] = None


class PricedLineItem(TierPrice):
    """Item de carrinho precificado"""
    product_id: int
    product_name: str


class CartTotal(BaseModel):
    """Totais agregados de um carrinho"""
    items: List[PricedLineItem]
    total: Money
    total_savings: Money
    item_count: int


class TierDisplay(BaseModel):
    """Projeção de uma faixa para exibição"""
    range: str
    price: str
    discount: str
    unit_price: float
