"""
Statement composition helpers shared by the repository.

All helpers take and return SQLAlchemy ``Select`` constructs, so the
filter predicate is written once and reused for the page query and the
matching count query.
"""
from sqlalchemy import Select, func

from blog.config import settings


def select_query(stmt: Select, for_update: bool = False) -> Select:
    """
    Append a pessimistic row lock (``FOR UPDATE``) when *for_update* is set.

    The lock is held until the enclosing transaction ends.  Dialects
    without row locks (SQLite) render the statement unchanged.
    """
    if for_update:
        return stmt.with_for_update()
    return stmt


def count_query(stmt: Select) -> Select:
    """
    Rewrite ``SELECT <columns> ... WHERE <predicate>`` into
    ``SELECT count(*) ... WHERE <predicate>``.

    The FROM clause and predicate are kept verbatim; ordering and window
    are dropped so the total covers the whole filtered set.  Pass the
    statement before ``select_query`` locks it: aggregates cannot be
    combined with ``FOR UPDATE``.
    """
    return (
        stmt.with_only_columns(func.count(), maintain_column_froms=True)
        .order_by(None)
        .limit(None)
        .offset(None)
    )


def normalize_pagination(page: int, size: int) -> tuple[int, int]:
    """
    ``page <= 0`` becomes 1, ``size <= 0`` becomes the default page size
    and oversized pages are clamped to ``settings.MAX_PAGE_SIZE``.
    """
    if page <= 0:
        page = 1
    if size <= 0:
        size = settings.DEFAULT_PAGE_SIZE
    return page, min(size, settings.MAX_PAGE_SIZE)


def pagination_query(stmt: Select, page: int, size: int) -> Select:
    """Window *stmt* to *size* rows starting at ``(page - 1) * size``."""
    page, size = normalize_pagination(page, size)
    return stmt.limit(size).offset((page - 1) * size)
