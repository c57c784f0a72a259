"""
Module: selector_kernel.store
Responsibility: Record-store collaborator.  Executes rendered selector query
    text against a SQLAlchemy Session with the identifier set bound as a
    parameter, returning materialised rows or a lazy query handle.
Architecture position: Kernel > Store.  May import from logging_config.
    MUST NOT import from selectors/ (selectors depend on the store, not the
    reverse).

Invariants enforced:
    - The identifier set is bound through an expanding ``:ids`` parameter and
      is never interpolated into the query text.
    - Read-only: the store never calls session.add/delete/flush/commit.
    - QueryHandle executes nothing until iterated.

Failure modes:
    - Any SQLAlchemy error raised during execution (malformed ORDER BY,
      unknown column, connection fault) propagates to the caller unchanged.
"""

from collections.abc import Iterable, Iterator
from typing import Any
from uuid import UUID

from sqlalchemy import TextClause, bindparam, text
from sqlalchemy.orm import Session

from selector_kernel.logging_config import get_logger

logger = get_logger("store")

Record = dict[str, Any]

IDS_PARAM = "ids"


def bind_ids(ids: Iterable[Any]) -> list[Any]:
    """Normalise an identifier set for binding (UUIDs as String(36))."""
    return [str(i) if isinstance(i, UUID) else i for i in ids]


def id_statement(query_text: str) -> TextClause:
    """Compile query text with ``:ids`` declared as an expanding parameter."""
    return text(query_text).bindparams(bindparam(IDS_PARAM, expanding=True))


class QueryHandle:
    """
    Lazy, streamable result of an identifier-scoped query.

    Contract:
        Each iteration re-executes the query in the owning session.  Rows are
        plain dicts keyed by column name.

    Guarantees:
        - No I/O happens at construction time.
        - ``batches()`` yields non-empty lists of at most ``size`` rows.
    """

    def __init__(
        self,
        session: Session,
        query_text: str,
        ids: Iterable[Any],
        batch_size: int | None = None,
    ):
        self.session = session
        self.query_text = query_text
        self.ids = bind_ids(ids)
        self.batch_size = batch_size

    def _execute(self, yield_per: int | None):
        options = {"yield_per": yield_per} if yield_per else {}
        logger.debug(
            "record_store_query",
            extra={
                "query": self.query_text,
                "id_count": len(self.ids),
                "yield_per": yield_per,
            },
        )
        return self.session.execute(
            id_statement(self.query_text),
            {IDS_PARAM: self.ids},
            execution_options=options,
        ).mappings()

    def __iter__(self) -> Iterator[Record]:
        for row in self._execute(self.batch_size):
            yield dict(row)

    def batches(self, size: int | None = None) -> Iterator[list[Record]]:
        """
        Iterate the result in lists of ``size`` rows.

        ``size`` defaults to the handle's batch size.  The query runs when
        the returned iterator is first advanced.

        Raises:
            ValueError: If no positive batch size is available (raised by
                this call, before anything executes).
        """
        if size is None:
            size = self.batch_size
        if not size or size < 1:
            raise ValueError(f"Batch size must be a positive integer, got {size!r}")
        return self._iter_batches(size)

    def _iter_batches(self, size: int) -> Iterator[list[Record]]:
        for partition in self._execute(size).partitions(size):
            yield [dict(row) for row in partition]

    def all(self) -> list[Record]:
        """Materialise every row."""
        return list(self)

    def __repr__(self) -> str:
        return f"QueryHandle({self.query_text!r}, ids={len(self.ids)})"


class RecordStore:
    """
    Executes selector query text in a caller-owned session.

    Contract:
        The caller owns the session and its transaction scope; the store only
        issues SELECTs through it.
    """

    def __init__(self, session: Session):
        self.session = session

    def query(self, query_text: str, ids: Iterable[Any]) -> list[Record]:
        """
        Execute query text and materialise every row.

        Preconditions: query_text contains exactly one ``:ids`` placeholder.
        Postconditions: Returns all matching rows as dicts, in query order.
        """
        return QueryHandle(self.session, query_text, ids).all()

    def query_handle(
        self,
        query_text: str,
        ids: Iterable[Any],
        batch_size: int | None = None,
    ) -> QueryHandle:
        """Return a lazy handle over the query; nothing is executed yet."""
        return QueryHandle(self.session, query_text, ids, batch_size=batch_size)
