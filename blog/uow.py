"""
Transactional unit-of-work.

``UnitOfWork.run(fn)`` opens a fresh session, begins a transaction and
hands ``fn`` a lock-aware ``Repository`` bound to it.  The unit-of-work
is the only component that commits or rolls back:

- ``fn`` returns: commit.  A failing commit raises ``CommitError``.
- ``fn`` raises: roll back and re-raise.  A failing rollback raises
  ``RollbackError`` carrying both exceptions.
- ``fn`` exceeds the deadline or the task is cancelled: roll back and let
  ``TimeoutError`` / ``CancelledError`` propagate.
"""
from __future__ import annotations

import asyncio
import enum
import logging
from typing import Awaitable, Callable, TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from blog.config import settings
from blog.exceptions import CommitError, RollbackError
from blog.repository import Repository

logger = logging.getLogger(__name__)

T = TypeVar("T")


class TransactionState(str, enum.Enum):
    IDLE = "idle"
    BEGUN = "begun"
    COMMITTED = "committed"
    ROLLED_BACK = "rolled_back"


class UnitOfWork:
    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        timeout: float | None = None,
    ) -> None:
        self._session_factory = session_factory
        # 0 disables the deadline; None falls back to the configured one.
        self.timeout = settings.TRANSACTION_TIMEOUT_SECONDS if timeout is None else timeout
        self.state = TransactionState.IDLE

    async def run(self, fn: Callable[[Repository], Awaitable[T]]) -> T:
        self.state = TransactionState.IDLE
        async with self._session_factory() as session:
            await session.begin()
            self.state = TransactionState.BEGUN
            repo = Repository(session, for_update=True)

            try:
                if self.timeout:
                    result = await asyncio.wait_for(fn(repo), self.timeout)
                else:
                    result = await fn(repo)
            except asyncio.CancelledError:
                await self._rollback_on_cancel(session)
                raise
            except Exception as exc:
                await self._rollback(session, exc)
                raise

            try:
                await session.commit()
            except SQLAlchemyError as exc:
                logger.warning("Transaction commit failed: %s", exc)
                raise CommitError("failed to commit transaction") from exc

            self.state = TransactionState.COMMITTED
            return result

    async def _rollback(self, session: AsyncSession, error: Exception) -> None:
        try:
            await session.rollback()
        except Exception as rb_exc:
            logger.error("Rollback failed after %r: %s", error, rb_exc)
            raise RollbackError(error, rb_exc) from error
        self.state = TransactionState.ROLLED_BACK
        logger.debug("Transaction rolled back: %r", error)

    async def _rollback_on_cancel(self, session: AsyncSession) -> None:
        # Cancellation must keep propagating, so a rollback failure here is
        # logged instead of replacing the CancelledError.
        try:
            await asyncio.shield(session.rollback())
        except Exception:
            logger.exception("Rollback failed after cancellation")
            return
        self.state = TransactionState.ROLLED_BACK
