"""Database initialization helpers."""

from __future__ import annotations

from sqlalchemy import inspect, text
from sqlalchemy.engine import Engine

from .db_models import Base


def init_db(engine: Engine) -> None:
    """Create tables and add columns missing from older databases."""
    Base.metadata.create_all(engine)
    _migrate_product_schema(engine)


def _migrate_product_schema(engine: Engine) -> None:
    """Upgrade databases created when products only stored name/expiry_info."""
    columns = {column["name"] for column in inspect(engine).get_columns("products")}
    required_columns = {
        "expiry_date": "ALTER TABLE products ADD COLUMN expiry_date VARCHAR(10)",
        "created_at": "ALTER TABLE products ADD COLUMN created_at DATETIME",
    }
    missing = [ddl for column, ddl in required_columns.items() if column not in columns]
    if not missing:
        return
    with engine.begin() as conn:
        for ddl in missing:
            conn.execute(text(ddl))
        # backfill rows written before created_at existed
        conn.execute(
            text("UPDATE products SET created_at = CURRENT_TIMESTAMP WHERE created_at IS NULL")
        )
