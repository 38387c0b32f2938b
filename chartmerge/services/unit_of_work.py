"""Transaction scope handed to services that need savepoint control."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from sqlalchemy.ext.asyncio import AsyncSession, AsyncSessionTransaction

from ..utils.logger import logger


class UnitOfWork:
    """Wraps one session's top-level transaction and its savepoints.

    ``nested()`` opens a SAVEPOINT; leaving the block normally releases it,
    leaving it with an exception rolls back to it and re-raises. Work done in
    released savepoints is kept until ``commit()`` or ``rollback()`` ends the
    outer transaction.
    """

    def __init__(self, session: AsyncSession):
        self.session = session
        self._depth = 0

    @property
    def depth(self) -> int:
        """Number of savepoints currently open."""
        return self._depth

    @asynccontextmanager
    async def nested(self, name: str = "savepoint") -> AsyncGenerator[AsyncSessionTransaction]:
        """Run the enclosed block inside its own savepoint.

        Args:
            name: Label used in debug logs

        Yields:
            The nested session transaction
        """
        self._depth += 1
        logger.debug(f"Opening savepoint '{name}' (depth {self._depth})")
        try:
            async with self.session.begin_nested() as transaction:
                yield transaction
            logger.debug(f"Released savepoint '{name}'")
        except Exception:
            logger.debug(f"Rolled back to savepoint '{name}'")
            raise
        finally:
            self._depth -= 1

    async def commit(self) -> None:
        """Commit the outer transaction, including every released savepoint."""
        await self.session.commit()

    async def rollback(self) -> None:
        """Roll back the outer transaction."""
        await self.session.rollback()
