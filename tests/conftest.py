from __future__ import annotations

import os

os.environ.setdefault("SWEEP_ENABLED", "false")
os.environ.setdefault("IMAGE_SEARCH_ENABLED", "false")

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from src.expiry_tracker.db.db_init import init_db
from src.expiry_tracker.products.products_repository import ProductRepository


@pytest.fixture
def session_factory(tmp_path):
    # File-backed SQLite so worker threads share one database.
    engine = create_engine(f"sqlite:///{tmp_path / 'expiry.db'}", future=True)
    factory = sessionmaker(bind=engine, expire_on_commit=False)
    init_db(engine)
    yield factory
    engine.dispose()


@pytest.fixture
def product_repo(session_factory) -> ProductRepository:
    return ProductRepository(session_factory)
