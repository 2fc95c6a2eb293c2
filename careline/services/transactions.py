from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from careline.services.errors import (
    ConflictError,
    ConflictReason,
    InternalError,
    OrderingError,
)

logger = logging.getLogger(__name__)

# SQLSTATE Postgres d'une violation de contrainte unique
UNIQUE_VIOLATION = "23505"


def is_unique_violation(exc: IntegrityError) -> bool:
    orig = exc.orig
    if getattr(orig, "sqlstate", None) == UNIQUE_VIOLATION:
        return True
    # sqlite3 n'a pas de sqlstate, seulement le message
    return "UNIQUE constraint failed" in str(orig)


@contextmanager
def atomic(db: Session, operation: str) -> Iterator[Session]:
    """
    Unité de travail : tout ce qui est fait sur `db` dans le bloc est commité
    ensemble, ou rien du tout.

    - erreur métier (OrderingError) : rollback puis propagation telle quelle
    - violation de contrainte unique : rollback -> ConflictError(duplicate)
    - autre violation de contrainte (FK, CHECK) : rollback
      -> ConflictError(constraint_violation)
    - toute autre erreur (SQLAlchemy ou bug Python) : rollback, log, InternalError générique
    """
    try:
        yield db
        db.commit()
    except OrderingError:
        db.rollback()
        raise
    except IntegrityError as exc:
        db.rollback()
        logger.warning("%s rejected by a database constraint: %s", operation, exc.orig)
        if is_unique_violation(exc):
            raise ConflictError(ConflictReason.duplicate, f"{operation} conflicts with existing data") from exc
        raise ConflictError(
            ConflictReason.constraint_violation,
            f"{operation} references missing or invalid data",
        ) from exc
    except Exception as exc:
        db.rollback()
        logger.exception("%s failed inside the transaction", operation)
        raise InternalError(f"{operation} failed") from exc
