from sqlalchemy import ColumnElement
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.todo import Todo
from app.repositories.base import BaseRepository


def _escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class TodoRepository(BaseRepository[Todo]):
    def __init__(self) -> None:
        super().__init__(Todo)

    def _owner_filter(self, owner_id: str, search: str = "") -> list[ColumnElement[bool]]:
        where = [Todo.owner_id == owner_id]
        if search:
            where.append(Todo.title.ilike(f"%{_escape_like(search)}%", escape="\\"))
        return where

    async def count_for_owner(self, db: AsyncSession, owner_id: str, search: str = "") -> int:
        return await self.count(db, *self._owner_filter(owner_id, search))

    async def page_for_owner(
        self,
        db: AsyncSession,
        owner_id: str,
        *,
        search: str,
        limit: int,
        offset: int,
    ) -> list[Todo]:
        return await self.list(
            db,
            *self._owner_filter(owner_id, search),
            order_by=(Todo.created_at.desc(), Todo.id.desc()),
            limit=limit,
            offset=offset,
        )

    async def get_owned(self, db: AsyncSession, owner_id: str, todo_id: str) -> Todo | None:
        return await self.find_one(db, Todo.id == todo_id, Todo.owner_id == owner_id)

    async def delete_owned(self, db: AsyncSession, owner_id: str, todo_id: str) -> bool:
        return await self.delete_where(db, Todo.id == todo_id, Todo.owner_id == owner_id) > 0
