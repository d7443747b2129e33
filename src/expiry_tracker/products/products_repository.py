"""Product expiry repository backed by SQLAlchemy."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from datetime import date, datetime

from sqlalchemy.orm import Session

from ..db.db_models import ProductModel
from ..exceptions import handle_sqlalchemy_errors
from .products_models import ExpiryRecord, parse_expiry_days


class ProductRepository:
    """Durable mapping from product name to its cached expiry record."""

    def __init__(self, session_factory: Callable[[], Session]) -> None:
        self._session_factory = session_factory

    def get(self, name: str) -> ExpiryRecord | None:
        with handle_sqlalchemy_errors(entity="product"):
            with self._session_factory() as session:
                row = (
                    session.query(ProductModel)
                    .filter(ProductModel.name == name)
                    .one_or_none()
                )
                if row is None:
                    return None
                return self._to_domain(row)

    def put(self, record: ExpiryRecord) -> ExpiryRecord:
        """Insert a new record; raises ``DuplicateProductError`` if the name exists."""
        with handle_sqlalchemy_errors(entity=f"product '{record.name}'"):
            with self._session_factory() as session:
                row = ProductModel(
                    name=record.name,
                    expiry_info=record.expiry_info,
                    expiry_date=record.expiry_date.isoformat() if record.expiry_date else None,
                    created_at=record.created_at or datetime.now(),
                )
                session.add(row)
                session.commit()
                session.refresh(row)
                return self._to_domain(row)

    def list_by_expiry_date(self, day: date) -> Sequence[ExpiryRecord]:
        with handle_sqlalchemy_errors(entity="product"):
            with self._session_factory() as session:
                rows = (
                    session.query(ProductModel)
                    .filter(ProductModel.expiry_date == day.isoformat())
                    .order_by(ProductModel.name)
                    .all()
                )
                return [self._to_domain(row) for row in rows]

    def list_products(self) -> Sequence[ExpiryRecord]:
        with handle_sqlalchemy_errors(entity="product"):
            with self._session_factory() as session:
                rows = session.query(ProductModel).order_by(ProductModel.name).all()
                return [self._to_domain(row) for row in rows]

    @staticmethod
    def _to_domain(model: ProductModel) -> ExpiryRecord:
        expiry_date = None
        if model.expiry_date:
            try:
                expiry_date = date.fromisoformat(model.expiry_date)
            except ValueError:
                expiry_date = None
        return ExpiryRecord(
            name=model.name,
            expiry_info=model.expiry_info,
            expiry_days=parse_expiry_days(model.expiry_info),
            expiry_date=expiry_date,
            created_at=model.created_at,
        )
