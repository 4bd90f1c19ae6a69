"""
Domain error type and the mappings from external error sources into it.

Services raise ``TrackerError``; the RPC router turns it into the ``err`` arm of
a response. Each external library gets its own mapping function.
"""
import logging

from sqlalchemy.exc import IntegrityError, NoResultFound, SQLAlchemyError

from tracker.schemas.error import (
    DatabaseError,
    Error,
    HashingError,
    NotFound,
    OtherDatabaseError,
    UniqueViolation,
)

logger = logging.getLogger(__name__)

# SQLSTATE for unique_violation
PG_UNIQUE_VIOLATION = "23505"


class TrackerError(Exception):
    """A business error that is reported to the client as data."""

    def __init__(self, error: Error):
        super().__init__(str(error))
        self.error = error


def _is_unique_violation(orig: BaseException) -> bool:
    code = getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)
    if code == PG_UNIQUE_VIOLATION:
        return True
    return "UNIQUE constraint failed" in str(orig)


def _pg_diag(orig: BaseException, name: str):
    diag = getattr(orig, "diag", None)
    return getattr(diag, name, None) if diag is not None else None


def database_error(exc: SQLAlchemyError) -> DatabaseError:
    """Map a SQLAlchemy exception onto the wire error taxonomy."""
    if isinstance(exc, NoResultFound):
        error = DatabaseError(error=NotFound())
    elif isinstance(exc, IntegrityError) and _is_unique_violation(exc.orig):
        message = str(exc.orig).strip()
        error = DatabaseError(
            error=UniqueViolation(
                message=_pg_diag(exc.orig, "message_primary") or message,
                # SQLite has no detail field, but its message names the column
                details=_pg_diag(exc.orig, "message_detail") or message,
                hint=_pg_diag(exc.orig, "message_hint"),
            )
        )
    else:
        error = DatabaseError(error=OtherDatabaseError(message=repr(exc)))
    logger.debug(f"Mapped database exception to {error!r}")
    return error


def hashing_error(exc: Exception) -> HashingError:
    """Map a passlib failure onto the wire error taxonomy."""
    return HashingError(message=f"{exc} ({exc!r})")
