# -*- coding: utf-8 -*-
import logging
from decimal import Decimal
from typing import Any, Dict, List, Literal, Optional

from fastapi import Depends, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session, selectinload

import catalog_service
from catalog_service import InsufficientStockError, ProductNotFoundError
from config import settings
from database import ORDER_STATUSES, Order, OrderItem, Product, get_db, init_db
from payment_service import PaymentAuthError, PaymentGateway, PaymentServiceError, to_minor_units
# Importar pricing module
from pricing import CartTotal, PricingError, PricingTier, compute_cart_total, format_tiers

logger = logging.getLogger(__name__)

app = FastAPI(title="Bulk Storefront API", version="1.0.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

init_db()


def get_payment_gateway() -> PaymentGateway:
    return PaymentGateway()


@app.get("/health")
async def health():
    return {"status": "online", "app": settings.app_slug}


# ============================================================================
# CATALOG ENDPOINTS
# ============================================================================

class TierIn(BaseModel):
    """Faixa de preço informada no cadastro"""
    min_quantity: int = Field(..., ge=0)
    max_quantity: Optional[int] = Field(None, ge=0, description="None = sem limite superior")
    unit_price: Decimal = Field(..., ge=0, decimal_places=2)
    discount_percentage: float = Field(0.0, ge=0)


class ProductCreateRequest(BaseModel):
    name: str = Field(..., min_length=1)
    description: Optional[str] = None
    base_price: Decimal = Field(..., ge=0, decimal_places=2)
    image_url: Optional[str] = None
    stock_quantity: int = Field(0, ge=0)
    pricing_tiers: List[TierIn] = Field(default_factory=list)


def _product_to_dict(product: Product) -> Dict[str, Any]:
    tiers = catalog_service.tiers_for(product)
    return {
        "id": product.id,
        "name": product.name,
        "description": product.description,
        "base_price": float(product.base_price),
        "image_url": product.image_url,
        "stock_quantity": product.stock_quantity,
        "pricing_tiers": [
            {
                "id": tier.id,
                "min_quantity": tier.min_quantity,
                "max_quantity": None if tier.is_unbounded else tier.max_quantity.max,
                "unit_price": float(tier.unit_price),
                "discount_percentage": tier.discount_percentage,
            }
            for tier in tiers
        ],
        "formatted_tiers": [t.model_dump() for t in format_tiers(tiers)],
    }


@app.get("/api/products")
async def list_products(db: Session = Depends(get_db)):
    """Lista produtos ativos com faixas de preço"""
    try:
        products = catalog_service.list_active_products(db)
        return {"success": True, "products": [_product_to_dict(p) for p in products]}
    except PricingError as e:
        logger.error(f"Faixas inconsistentes no catálogo: {e}")
        raise HTTPException(status_code=500, detail={"message": f"Catálogo inconsistente: {str(e)}"})


@app.post("/api/products", status_code=201)
async def create_product(request: ProductCreateRequest, db: Session = Depends(get_db)):
    """
    Cadastra produto com faixas de preço.

    Raises:
        422: Faixas inválidas (sobrepostas, preço crescente, max < min)
    """
    try:
        tiers = [
            PricingTier.from_row(
                id=None,
                min_quantity=t.min_quantity,
                max_quantity=t.max_quantity,
                unit_price=t.unit_price,
                discount_percentage=t.discount_percentage,
            )
            for t in request.pricing_tiers
        ]
        product = catalog_service.create_product(
            db,
            name=request.name,
            description=request.description,
            base_price=request.base_price,
            image_url=request.image_url,
            stock_quantity=request.stock_quantity,
            tiers=tiers,
        )
    except ValueError as e:
        # PricingError ou erro de validação das faixas
        raise HTTPException(status_code=422, detail={"message": str(e)})

    return {"success": True, "product": _product_to_dict(product)}


@app.get("/api/products/{product_id}/tiers")
async def product_tiers(product_id: int, db: Session = Depends(get_db)):
    """Tabela de faixas formatada para exibição"""
    try:
        product = catalog_service.get_active_product(db, product_id)
        tiers = catalog_service.tiers_for(product)
    except ProductNotFoundError as e:
        raise HTTPException(status_code=404, detail={"message": str(e)})
    except PricingError as e:
        raise HTTPException(status_code=500, detail={"message": f"Catálogo inconsistente: {str(e)}"})

    return {
        "product_id": product.id,
        "tiers": [t.model_dump() for t in format_tiers(tiers)],
    }


# ============================================================================
# CART ENDPOINTS
# ============================================================================

class CartItemIn(BaseModel):
    product_id: int
    quantity: int = Field(..., ge=1)


class CartCalculateRequest(BaseModel):
    items: List[CartItemIn] = Field(default_factory=list)


class CartCalculateResponse(BaseModel):
    success: bool
    cart: CartTotal


def _price_cart(db: Session, items: List[CartItemIn]) -> CartTotal:
    """Resolve produtos no catálogo e precifica o carrinho, mapeando erros para HTTP"""
    try:
        line_items = catalog_service.build_line_items(db, [item.model_dump() for item in items])
        return compute_cart_total(line_items)
    except ProductNotFoundError as e:
        raise HTTPException(status_code=404, detail={"message": str(e)})
    except InsufficientStockError as e:
        raise HTTPException(status_code=400, detail={"message": str(e), "available": e.available})
    except PricingError as e:
        raise HTTPException(status_code=422, detail={"message": str(e)})


@app.post("/api/cart/calculate", response_model=CartCalculateResponse)
async def calculate_cart(request: CartCalculateRequest, db: Session = Depends(get_db)):
    """
    Calcula totais do carrinho com desconto por volume.

    Raises:
        404: Produto não encontrado
        400: Estoque insuficiente
        422: Carrinho vazio ou sem faixa aplicável
    """
    if not request.items:
        raise HTTPException(status_code=422, detail={"message": "Itens do carrinho inválidos"})

    cart = _price_cart(db, request.items)
    return CartCalculateResponse(success=True, cart=cart)


# ============================================================================
# ORDER ENDPOINTS
# ============================================================================

class OrderCreateRequest(BaseModel):
    user_id: Optional[str] = None
    items: List[CartItemIn] = Field(default_factory=list)
    shipping_address: Optional[Dict[str, Any]] = None


class OrderStatusUpdate(BaseModel):
    status: Literal[ORDER_STATUSES]


def _order_to_dict(order: Order) -> Dict[str, Any]:
    return {
        "id": order.id,
        "user_id": order.user_id,
        "total_amount": float(order.total_amount),
        "status": order.status,
        "payment_intent_id": order.payment_intent_id,
        "shipping_address": order.shipping_address,
        "created_at": order.created_at.isoformat(),
        "updated_at": order.updated_at.isoformat(),
        "items": [
            {
                "id": item.id,
                "product_id": item.product_id,
                "product_name": item.product.name if item.product else None,
                "quantity": item.quantity,
                "unit_price": float(item.unit_price),
                "subtotal": float(item.subtotal),
            }
            for item in order.items
        ],
    }


def _get_order(db: Session, order_id: int) -> Order:
    order = (
        db.query(Order)
        .options(selectinload(Order.items).selectinload(OrderItem.product))
        .filter(Order.id == order_id)
        .first()
    )
    if order is None:
        raise HTTPException(status_code=404, detail={"message": "Pedido não encontrado"})
    return order


@app.post("/api/orders", status_code=201)
async def create_order(
        request: OrderCreateRequest,
        db: Session = Depends(get_db),
        gateway: PaymentGateway = Depends(get_payment_gateway),
):
    """
    Cria pedido: precifica o carrinho, abre o pagamento e persiste o pedido.

    Raises:
        422: Carrinho vazio ou sem faixa aplicável
        502: Falha no processador de pagamentos
    """
    if not request.items:
        raise HTTPException(status_code=422, detail={"message": "Carrinho vazio"})

    cart = _price_cart(db, request.items)

    try:
        intent = await gateway.create_payment_intent(
            amount=to_minor_units(cart.total),
            currency=settings.currency,
            metadata={
                "user_id": request.user_id or "guest",
                "item_count": cart.item_count,
            },
        )
    except PaymentAuthError as e:
        logger.error(f"Autenticação com o processador de pagamentos falhou: {e}")
        raise HTTPException(status_code=502, detail={"message": "Processador de pagamentos indisponível"})
    except PaymentServiceError as e:
        raise HTTPException(status_code=502, detail={"message": f"Erro ao criar pagamento: {str(e)}"})

    order = Order(
        user_id=request.user_id,
        total_amount=cart.total,
        status="pending",
        payment_intent_id=intent.id,
        shipping_address=request.shipping_address,
    )
    for item in cart.items:
        order.items.append(OrderItem(
            product_id=item.product_id,
            quantity=item.quantity,
            unit_price=item.unit_price,
            subtotal=item.subtotal,
        ))

    db.add(order)
    db.commit()
    db.refresh(order)
    logger.info(f"Pedido {order.id} criado: total {cart.total}, payment intent {intent.id}")

    return {
        "success": True,
        "order": {
            "id": order.id,
            "total": float(order.total_amount),
            "status": order.status,
            "client_secret": intent.client_secret,
        },
    }


@app.get("/api/orders/{order_id}")
async def get_order(order_id: int, db: Session = Depends(get_db)):
    order = _get_order(db, order_id)
    return {"success": True, "order": _order_to_dict(order)}


@app.patch("/api/orders/{order_id}")
async def update_order_status(order_id: int, request: OrderStatusUpdate, db: Session = Depends(get_db)):
    order = _get_order(db, order_id)
    order.status = request.status
    db.commit()
    db.refresh(order)
    logger.info(f"Pedido {order.id} atualizado para {order.status}")
    return {"success": True, "order": _order_to_dict(order)}


# ========= MAIN PARA RODAR DEBUGANDO =========


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("app:app", host="127.0.0.1", port=5002, reload=settings.dev_mode)
