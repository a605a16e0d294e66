from __future__ import annotations

from typing import Any, Generic, Sequence, TypeVar

from sqlalchemy import ColumnElement, delete as sa_delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.inspection import inspect as sa_inspect

T = TypeVar("T")  # SQLAlchemy model class (Declarative)


class BaseRepository(Generic[T]):
    """
    Shared async repository for one SQLAlchemy model.

    - Accepts model instances only (no dicts / pydantic models).
    - Never commits: the service owning the unit of work commits or rolls back.
    """

    def __init__(self, model: type[T]) -> None:
        self.model = model

    # ------------------------ Read ------------------------

    async def get(self, session: AsyncSession, pk: Any) -> T | None:
        return await session.get(self.model, pk)

    async def find_one(self, session: AsyncSession, *where: ColumnElement[bool]) -> T | None:
        stmt = select(self.model).where(*where)
        res = await session.execute(stmt)
        return res.scalars().first()

    async def list(
        self,
        session: AsyncSession,
        *where: ColumnElement[bool],
        order_by: Sequence[Any] | None = None,
        limit: int | None = 100,
        offset: int | None = 0,
    ) -> list[T]:
        stmt = select(self.model).where(*where)
        if order_by:
            stmt = stmt.order_by(*order_by)
        if limit is not None:
            stmt = stmt.limit(limit)
        if offset:
            stmt = stmt.offset(offset)
        res = await session.execute(stmt)
        return list(res.scalars().all())

    async def count(self, session: AsyncSession, *where: ColumnElement[bool]) -> int:
        stmt = select(func.count()).select_from(self.model).where(*where)
        res = await session.execute(stmt)
        return int(res.scalar_one())

    # ------------------------ Write ------------------------

    async def create(self, session: AsyncSession, obj: T) -> T:
        """Insert a new (transient) instance and flush so defaults and PK are populated."""
        state = sa_inspect(obj)
        if not state.transient:
            raise ValueError("create(): expected a transient (new) SQLAlchemy model instance")
        session.add(obj)
        await session.flush()
        return obj

    async def delete_where(self, session: AsyncSession, *where: ColumnElement[bool]) -> int:
        """Delete matching rows, returning how many went away."""
        stmt = sa_delete(self.model).where(*where)
        res = await session.execute(stmt)
        return res.rowcount or 0
