"""Synchronous command dispatch for the ordering context.

Protean writes aggregates and their events when the unit of work commits,
after the handler has returned. Storage errors raised at that point are
reported here as PersistenceFailure; every other domain error passes through.
"""

from protean.exceptions import DatabaseError, ExpectedVersionError, ProteanException, TransactionError
from protean.utils.globals import current_domain

from ordering.errors import PersistenceFailure
from ordering.utils.logging import get_logger

logger = get_logger(__name__)

_STORAGE_ERRORS = (DatabaseError, ExpectedVersionError, TransactionError)


def dispatch(command):
    """Process ``command`` synchronously and return the handler's result."""
    try:
        return current_domain.process(command, asynchronous=False)
    except PersistenceFailure:
        raise
    except _STORAGE_ERRORS as exc:
        logger.error("command_commit_failed", command=type(command).__name__, error=str(exc))
        raise PersistenceFailure({"storage": [f"Could not record the change: {exc}"]}) from exc
    except ProteanException:
        raise
    except Exception as exc:
        logger.error("command_commit_failed", command=type(command).__name__, error=str(exc))
        raise PersistenceFailure({"storage": [f"Could not record the change: {exc}"]}) from exc
