# -*- coding: utf-8 -*-
"""
Catalog Service
Leitura/escrita de produtos e faixas de preço, e montagem dos itens de carrinho
que são entregues ao motor de precificação.
"""

import logging
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from database import PricingTierRow, Product
from pricing import LineItemRequest, PricingTier, validate_tier_set

logger = logging.getLogger(__name__)


class CatalogError(Exception):
    """Base exception para erros do catálogo"""
    pass


class ProductNotFoundError(CatalogError):
    """Produto inexistente ou inativo"""

    def __init__(self, product_id: int):
        self.product_id = product_id
        super().__init__(f"Produto {product_id} não encontrado")


class InsufficientStockError(CatalogError):
    """Quantidade solicitada maior que o estoque"""

    def __init__(self, product_name: str, available: int):
        self.product_name = product_name
        self.available = available
        super().__init__(f"Estoque insuficiente para {product_name}. Disponível: {available}")


def tiers_for(product: Product) -> List[PricingTier]:
    """Converte as linhas de faixa do produto em PricingTier (validando o conjunto)"""
    tiers = [
        PricingTier.from_row(
            id=row.id,
            min_quantity=row.min_quantity,
            max_quantity=row.max_quantity,
            unit_price=row.unit_price,
            discount_percentage=row.discount_percentage,
        )
        for row in product.pricing_tiers
    ]
    validate_tier_set(tiers)
    return tiers


def list_active_products(db: Session) -> List[Product]:
    stmt = (
        select(Product)
        .where(Product.is_active.is_(True))
        .options(selectinload(Product.pricing_tiers))
        .order_by(Product.id)
    )
    return list(db.scalars(stmt))


def get_active_product(db: Session, product_id: int) -> Product:
    stmt = (
        select(Product)
        .where(Product.id == product_id, Product.is_active.is_(True))
        .options(selectinload(Product.pricing_tiers))
    )
    product = db.scalars(stmt).first()
    if product is None:
        raise ProductNotFoundError(product_id)
    return product


def build_line_items(
        db: Session,
        items: Iterable[Dict[str, Any]],
) -> List[LineItemRequest]:
    """
    Resolve cada {product_id, quantity} no catálogo e monta os LineItemRequest.

    Args:
        db: Sessão do banco
        items: Pares produto/quantidade vindos da requisição

    Raises:
        ProductNotFoundError: Produto inexistente ou inativo
        InsufficientStockError: Quantidade acima do estoque
        InvalidInput: Faixas do produto inconsistentes
    """
    line_items = []
    for item in items:
        product = get_active_product(db, item["product_id"])
        quantity = item["quantity"]

        if quantity > product.stock_quantity:
            logger.warning(
                f"Estoque insuficiente: produto {product.id}, pedido {quantity}, disponível {product.stock_quantity}"
            )
            raise InsufficientStockError(product.name, product.stock_quantity)

        line_items.append(LineItemRequest(
            product_id=product.id,
            product_name=product.name,
            quantity=quantity,
            tiers=tiers_for(product),
        ))

    return line_items


def create_product(
        db: Session,
        name: str,
        base_price: Decimal,
        tiers: List[PricingTier],
        description: Optional[str] = None,
        image_url: Optional[str] = None,
        stock_quantity: int = 0,
) -> Product:
    """
    Cadastra um produto com suas faixas de preço.

    Raises:
        InvalidInput: Faixas sobrepostas ou com preço crescente
    """
    validate_tier_set(tiers)

    product = Product(
        name=name,
        description=description,
        base_price=base_price,
        image_url=image_url,
        stock_quantity=stock_quantity,
    )
    for tier in tiers:
        product.pricing_tiers.append(PricingTierRow(
            min_quantity=tier.min_quantity,
            max_quantity=None if tier.is_unbounded else tier.max_quantity.max,
            unit_price=tier.unit_price,
            discount_percentage=Decimal(str(tier.discount_percentage)),
        ))

    db.add(product)
    db.commit()
    db.refresh(product)
    logger.info(f"Produto {product.id} criado com {len(tiers)} faixas")
    return product
