"""Write serialisation for commands that move stock.

Protean compares aggregate versions in Python before it saves, which does not
stop two transactions from reading the same row and both writing it back.
Handlers that change stock counters therefore lock the rows they are about
to read, inside their unit of work, and keep the lock until it commits or
rolls back.

The memory provider has no transactions at all: each unit of work copies the
whole store and writes the copy back on commit. Commands against it are run
one at a time instead.
"""

import threading
from contextlib import contextmanager

import structlog
from protean.utils.globals import current_domain, current_uow
from sqlalchemy import update

from mustore.utils.db import is_relational

logger = structlog.get_logger(__name__)

_memory_writes = threading.Lock()


def lock_rows(aggregate_cls, identifiers) -> None:
    """Take write locks on the rows of ``aggregate_cls`` named by ``identifiers``.

    Each row is touched with a self-assigning ``UPDATE`` through the unit of
    work's session. On PostgreSQL that holds a row lock, on SQLite the
    database write lock, until the transaction ends. Reads that follow see
    the latest committed state.

    Rows are locked in identifier order so that two writers never wait on
    each other in a cycle. Missing rows are skipped; loading them afterwards
    raises ``ObjectNotFoundError`` as usual.

    Does nothing outside a unit of work or on non-relational providers.
    """
    dao = current_domain.repository_for(aggregate_cls)._dao
    if not current_uow or not is_relational(dao.provider):
        return

    session = current_uow.get_session(dao.provider.name)
    table = dao.database_model_cls.__table__
    for identifier in sorted({str(identifier) for identifier in identifiers}):
        session.execute(update(table).where(table.c.id == identifier).values(id=table.c.id))

    logger.debug("Rows locked", aggregate=aggregate_cls.__name__, count=len(set(identifiers)))


@contextmanager
def serialized_writes(domain):
    """Run the enclosed block alone when any provider of ``domain`` is in memory."""
    if all(is_relational(provider) for _, provider in domain.providers.items()):
        yield
        return

    with _memory_writes:
        yield
