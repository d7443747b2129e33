from datetime import date, datetime, timedelta

import pytest
from sqlalchemy import create_engine, text
from sqlalchemy.orm import sessionmaker

from src.expiry_tracker.db.db_init import init_db
from src.expiry_tracker.db.db_models import ProductModel
from src.expiry_tracker.exceptions import DuplicateProductError
from src.expiry_tracker.products.products_models import ExpiryRecord
from src.expiry_tracker.products.products_repository import ProductRepository


def test_put_then_get_returns_same_record(product_repo) -> None:
    created = datetime(2026, 10, 19, 9, 30)
    stored = product_repo.put(ExpiryRecord.from_oracle("Milk", "7 days", created))

    fetched = product_repo.get("Milk")

    assert fetched is not None
    assert fetched.name == "Milk"
    assert fetched.expiry_info == "7 days"
    assert fetched.expiry_days == 7
    assert fetched.expiry_date == date(2026, 10, 26)
    assert fetched == stored


def test_get_is_case_sensitive(product_repo) -> None:
    product_repo.put(ExpiryRecord.from_oracle("Milk", "7", datetime(2026, 1, 1, 12, 0)))

    assert product_repo.get("milk") is None


def test_put_duplicate_name_raises(product_repo, session_factory) -> None:
    product_repo.put(ExpiryRecord.from_oracle("Milk", "7", datetime(2026, 1, 1, 12, 0)))

    with pytest.raises(DuplicateProductError):
        product_repo.put(ExpiryRecord.from_oracle("Milk", "9", datetime(2026, 1, 1, 12, 0)))

    with session_factory() as session:
        assert session.query(ProductModel).filter(ProductModel.name == "Milk").count() == 1
    assert product_repo.get("Milk").expiry_info == "7"


def test_unparseable_answer_is_stored_without_date(product_repo) -> None:
    product_repo.put(
        ExpiryRecord.from_oracle("Honey", "practically forever", datetime(2026, 1, 1, 12, 0))
    )

    record = product_repo.get("Honey")

    assert record.expiry_days is None
    assert record.expiry_date is None


def test_list_by_expiry_date_filters_on_date(product_repo) -> None:
    created = datetime(2026, 10, 19, 9, 30)
    product_repo.put(ExpiryRecord.from_oracle("Eggs", "1", created))
    product_repo.put(ExpiryRecord.from_oracle("Cream", "1 day", created))
    product_repo.put(ExpiryRecord.from_oracle("Rice", "10", created))
    product_repo.put(ExpiryRecord.from_oracle("Salt", "unknown", created))

    matches = product_repo.list_by_expiry_date(created.date() + timedelta(days=1))

    assert [record.name for record in matches] == ["Cream", "Eggs"]
    assert [r.name for r in product_repo.list_products()] == ["Cream", "Eggs", "Rice", "Salt"]


def test_init_db_upgrades_legacy_products_table(tmp_path) -> None:
    engine = create_engine(f"sqlite:///{tmp_path / 'legacy.db'}", future=True)
    with engine.begin() as conn:
        conn.execute(
            text(
                "CREATE TABLE products (id INTEGER PRIMARY KEY AUTOINCREMENT, "
                "name TEXT UNIQUE, expiry_info TEXT)"
            )
        )
        conn.execute(text("INSERT INTO products (name, expiry_info) VALUES ('Bread', '5')"))

    init_db(engine)

    repo = ProductRepository(sessionmaker(bind=engine, expire_on_commit=False))
    record = repo.get("Bread")
    assert record is not None
    assert record.expiry_days == 5
    assert record.expiry_date is None
    assert record.created_at is not None
