"""Store-level exceptions shared by repositories and services."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import exc as sa_exc

__all__ = [
    "AppError",
    "RepositoryError",
    "DuplicateProductError",
    "DatabaseOperationError",
    "handle_sqlalchemy_errors",
]


class AppError(Exception):
    """Base class for application specific errors."""


class RepositoryError(AppError):
    """Base class for record store failures."""


class DuplicateProductError(RepositoryError):
    """Raised when a product name is already present in the store."""


class DatabaseOperationError(RepositoryError):
    """Raised when the store is unreachable or a statement fails."""


def _describe(entity: str | None, message: str) -> str:
    return f"{entity}: {message}" if entity else message


@contextmanager
def handle_sqlalchemy_errors(*, entity: str | None = None) -> Iterator[None]:
    """Re-raise SQLAlchemy failures as :class:`RepositoryError` subclasses.

    A unique-constraint hit becomes :class:`DuplicateProductError`; every
    other SQLAlchemy failure becomes :class:`DatabaseOperationError`.
    """

    try:
        yield
    except sa_exc.IntegrityError as exc:
        raise DuplicateProductError(_describe(entity, "already stored")) from exc
    except sa_exc.DBAPIError as exc:
        raise DatabaseOperationError(_describe(entity, "database operation failed")) from exc
    except sa_exc.SQLAlchemyError as exc:
        raise DatabaseOperationError(_describe(entity, str(exc))) from exc
