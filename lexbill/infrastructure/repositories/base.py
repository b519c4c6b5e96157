"""
Shared helpers for SQLAlchemy repositories.
"""

import logging
from contextlib import contextmanager
from datetime import date
from typing import Optional

from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError

from lexbill.domain.models.base import StorageError


logger = logging.getLogger(__name__)


@contextmanager
def storage_errors(operation: str):
    """
    Translate SQLAlchemy failures into StorageError.
    Constraint violations are not retryable; connection and lock failures are.
    """
    try:
        yield
    except IntegrityError as exc:
        logger.warning(f"Integrity error while trying to {operation}: {exc.orig}")
        raise StorageError(f"Could not {operation}: constraint violated", retryable=False) from exc
    except OperationalError as exc:
        logger.error(f"Database unavailable while trying to {operation}: {exc.orig}")
        raise StorageError(f"Could not {operation}: database unavailable") from exc
    except SQLAlchemyError as exc:
        logger.error(f"Database error while trying to {operation}: {exc}")
        raise StorageError(f"Could not {operation}") from exc


def within_period(query, column, start_date: Optional[date], end_date: Optional[date]):
    """Restrict a query to an inclusive date range."""
    if start_date:
        query = query.filter(column >= start_date)
    if end_date:
        query = query.filter(column <= end_date)
    return query


def group_by_month(rows):
    """Fold (date, amount) rows into [{"month", "count", "total"}] ordered by month."""
    months = {}
    for day, amount in rows:
        key = day.strftime("%Y-%m")
        bucket = months.setdefault(key, {"month": key, "count": 0, "total": 0.0})
        bucket["count"] += 1
        bucket["total"] += float(amount or 0)
    return [months[key] for key in sorted(months)]
