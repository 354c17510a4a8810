"""
parking_access.db.errors

Translation of driver/transport failures into the service error taxonomy.
"""

from __future__ import annotations

from collections.abc import AsyncIterator, Iterator
from contextlib import asynccontextmanager, contextmanager

from sqlalchemy.exc import IntegrityError, InterfaceError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from parking_access.errors import AlreadyExists, DependencyUnavailable


@contextmanager
def translate_store_errors() -> Iterator[None]:
    try:
        yield
    except (OperationalError, InterfaceError) as e:
        raise DependencyUnavailable("store", str(e.orig) if e.orig is not None else str(e)) from e


@asynccontextmanager
async def unit_of_work(session: AsyncSession, *, conflict: str) -> AsyncIterator[None]:
    """
    Commit the block's writes as one transaction, or roll all of them back.

    A unique-constraint violation, whether raised at flush or commit, becomes
    `AlreadyExists`. The services pre-check uniqueness; this covers writers racing
    past those checks.
    """

    try:
        yield
        with translate_store_errors():
            await session.commit()
    except IntegrityError as e:
        await session.rollback()
        raise AlreadyExists(conflict) from e
    except BaseException:
        await session.rollback()
        raise


def page_window(page: int | None, limit: int | None) -> tuple[int, int | None]:
    # Pages are 1-based; no limit means every row. Callers reject a page without a limit.
    if limit is None:
        return 0, None
    return (max(page or 1, 1) - 1) * limit, limit
