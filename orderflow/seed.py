"""Load accounts, products and inventory from CSV files.

Usage: python -m orderflow.seed [DATA_DIR]

Rows are merged on primary key, so running the loader twice leaves the
database unchanged.
"""

import csv
import sys
from decimal import Decimal
from pathlib import Path
from typing import Callable, Dict, List
from sqlalchemy import text
from sqlalchemy.orm import Session
from orderflow.domain.models import Account, Inventory, Product, ProductStatus, Role

DEFAULT_DATA_DIR = Path("seed_data")

def _to_bool(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "y")

def _account(row: Dict[str, str]) -> Account:
    return Account(
        id=int(row["id"]),
        email=row["email"],
        role=row.get("role") or Role.USER.value,
    )

def _product(row: Dict[str, str]) -> Product:
    return Product(
        id=int(row["id"]),
        name=row["name"],
        price=Decimal(row["price"]),
        product_status=row.get("product_status") or ProductStatus.ACTIVE.value,
        is_available=_to_bool(row.get("is_available") or "true"),
    )

def _inventory(row: Dict[str, str]) -> Inventory:
    return Inventory(
        id=int(row["id"]),
        product_id=int(row["product_id"]),
        quantity=int(row["quantity"]),
    )

# Load order matters: inventory references products
TABLE_FILES: List[tuple] = [
    ("accounts.csv", _account),
    ("products.csv", _product),
    ("inventory.csv", _inventory),
]

def load_file(db: Session, path: Path, build: Callable[[Dict[str, str]], object]) -> int:
    if not path.exists():
        print(f"{path} not found; skipping.")
        return 0
    with open(path, newline="", encoding="utf-8") as f:
        rows = list(csv.DictReader(f))
    for row in rows:
        db.merge(build(row))
    db.flush()
    print(f"Loaded {len(rows)} rows from {path.name}")
    return len(rows)

def reset_sequences(db: Session) -> None:
    """Move Postgres id sequences past the explicitly inserted ids."""
    if db.get_bind().dialect.name != "postgresql":
        return
    for model in (Account, Product, Inventory):
        table = model.__tablename__
        db.execute(text(f"SELECT setval('{table}_id_seq', (SELECT COALESCE(MAX(id), 1) FROM {table}))"))

def seed(db: Session, data_dir: Path = DEFAULT_DATA_DIR) -> Dict[str, int]:
    counts = {}
    try:
        for file, build in TABLE_FILES:
            counts[file] = load_file(db, data_dir / file, build)
        reset_sequences(db)
        db.commit()
    except Exception:
        db.rollback()
        raise
    return counts

def main():
    from orderflow.infrastructure.db import SessionLocal, init_models

    data_dir = Path(sys.argv[1]) if len(sys.argv) > 1 else DEFAULT_DATA_DIR
    init_models()
    with SessionLocal() as db:
        seed(db, data_dir)
    print("Seeding complete.")

if __name__ == "__main__":
    main()
