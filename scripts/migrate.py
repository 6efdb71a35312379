import os
import sys
from decimal import Decimal
from pathlib import Path

from dotenv import load_dotenv
from sqlalchemy import func, inspect, select, text

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

SAMPLE_TIERS = [
    (1, 10, "10.00", 0),
    (11, 50, "8.50", 15),
    (51, 100, "7.00", 30),
    (101, None, "6.00", 40),
]

SAMPLE_PRODUCTS = [
    ("Premium Widget", "Widget de alumínio para uso industrial", 500),
    ("Standard Gadget", "Gadget básico, vendido em caixas", 1000),
]


def seed_catalog(db):
    from catalog_service import create_product
    from pricing import PricingTier

    tiers = [
        PricingTier.from_row(None, min_q, max_q, price, discount)
        for min_q, max_q, price, discount in SAMPLE_TIERS
    ]
    for name, description, stock in SAMPLE_PRODUCTS:
        create_product(
            db,
            name=name,
            description=description,
            base_price=Decimal(SAMPLE_TIERS[0][2]),
            stock_quantity=stock,
            tiers=tiers,
        )


def main():
    load_dotenv()

    if not os.getenv("DATABASE_URL"):
        raise RuntimeError("Variável de ambiente DATABASE_URL não definida (configure no .env)")

    from database import PricingTierRow, Product, SessionLocal, engine, init_db

    print("🔌 Testando conexão com o banco…")
    with engine.connect() as conn:
        conn.execute(text("SELECT 1"))
    print("   ✔ Banco conectado.")

    print("🔨 Criando tabelas…")
    init_db()

    print("🔍 Tabelas encontradas:")
    for table_name in sorted(inspect(engine).get_table_names()):
        print(f"   - {table_name}")

    with SessionLocal() as db:
        product_count = db.scalar(select(func.count()).select_from(Product))
        if product_count == 0:
            print("📦 Catálogo vazio, inserindo produtos de exemplo…")
            seed_catalog(db)
            product_count = db.scalar(select(func.count()).select_from(Product))

        tier_count = db.scalar(select(func.count()).select_from(PricingTierRow))

    print(f"   ✔ Produtos: {product_count}")
    print(f"   ✔ Faixas de preço: {tier_count}")

    print("\n✅ Migração concluída com sucesso!")


if __name__ == "__main__":
    main()
