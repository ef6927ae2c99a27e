"""Small helpers shared by the route modules and services."""
import logging
from contextlib import contextmanager
from typing import Any, Iterator

from sqlalchemy import inspect, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from curriculum.core.errors import classify_integrity_error, not_found

logger = logging.getLogger(__name__)


def serialize(instance, exclude: tuple[str, ...] = ()) -> dict[str, Any]:
    return {
        c.key: getattr(instance, c.key)
        for c in inspect(instance).mapper.column_attrs
        if c.key not in exclude
    }


@contextmanager
def atomic(db: Session, conflict_message: str | None = None) -> Iterator[None]:
    """Run the block and commit; on any failure roll back.

    Constraint violations raised by a flush, an execute or the commit itself
    are re-raised as the matching AppError.
    """
    try:
        yield
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        error = classify_integrity_error(exc, conflict_message)
        if error.status_code >= 500:
            logger.error("Unclassified integrity error: %s", exc.orig)
        raise error from exc
    except Exception:
        db.rollback()
        raise


def get_or_404(db: Session, model, pk, what: str | None = None, for_update: bool = False):
    stmt = select(model).where(model.id == pk)
    if for_update:
        stmt = stmt.with_for_update()
    obj = db.execute(stmt).scalar_one_or_none()
    if obj is None:
        raise not_found(what or model.__name__)
    return obj


def apply_patch(obj, data: dict[str, Any]) -> list[str]:
    """Merge supplied, non-null fields onto ``obj``; unset or null fields keep their value."""
    changed = []
    for key, value in data.items():
        if value is None:
            continue
        setattr(obj, key, value)
        changed.append(key)
    return changed


def dialect_insert(db: Session, table):
    """INSERT construct supporting ON CONFLICT for the bound dialect."""
    if db.get_bind().dialect.name == "postgresql":
        return postgresql.insert(table)
    return sqlite.insert(table)
