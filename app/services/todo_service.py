import logging
import math

from sqlalchemy.ext.asyncio import AsyncSession

from app.config import get_settings
from app.exceptions import FreeTierLimitError, TodoNotFoundError, UserNotFoundError
from app.models.todo import Todo
from app.repositories.todo_repo import TodoRepository
from app.repositories.user_repo import UserRepository
from app.schemas.todo import TodoCreate, TodoOut, TodoPage, TodoUpdate

logger = logging.getLogger(__name__)


class TodoService:
    def __init__(self):
        self.repo = TodoRepository()
        self.users = UserRepository()

    async def list_todos(
        self,
        db: AsyncSession,
        owner_id: str,
        page: int = 1,
        search: str = "",
    ) -> TodoPage:
        """
        One page of the owner's todos, newest first.

        ``search`` is matched case-insensitively as a substring of the title.
        A page past the end comes back empty with the requested page echoed.
        """
        page_size = get_settings().page_size
        search = search.strip()

        matching = await self.repo.count_for_owner(db, owner_id, search)
        offset = (page - 1) * page_size
        todos = []
        if offset < matching:
            todos = await self.repo.page_for_owner(
                db,
                owner_id,
                search=search,
                limit=page_size,
                offset=offset,
            )
        return TodoPage(
            todos=[TodoOut.model_validate(t) for t in todos],
            current_page=page,
            total_pages=math.ceil(matching / page_size),
        )

    async def create_todo(self, db: AsyncSession, owner_id: str, todo_in: TodoCreate) -> Todo:
        # the owner row lock serialises concurrent creates so the count below stays accurate
        user = await self.users.get_for_update(db, owner_id)
        if user is None:
            raise UserNotFoundError(owner_id)

        limit = get_settings().free_todo_limit
        if not user.is_subscribed and await self.repo.count_for_owner(db, owner_id) >= limit:
            raise FreeTierLimitError(limit, owner_id)

        todo = await self.repo.create(db, Todo(title=todo_in.title, owner_id=owner_id, completed=False))
        await db.commit()
        await db.refresh(todo)
        logger.info("Todo %s created for %s", todo.id, owner_id)
        return todo

    async def update_todo(self, db: AsyncSession, owner_id: str, todo_id: str, todo_in: TodoUpdate) -> Todo:
        todo = await self.repo.get_owned(db, owner_id, todo_id)
        if todo is None:
            raise TodoNotFoundError(todo_id)

        todo.completed = todo_in.completed
        await db.commit()
        await db.refresh(todo)
        return todo

    async def delete_todo(self, db: AsyncSession, owner_id: str, todo_id: str) -> None:
        deleted = await self.repo.delete_owned(db, owner_id, todo_id)
        if not deleted:
            await db.rollback()
            raise TodoNotFoundError(todo_id)
        await db.commit()
        logger.info("Todo %s deleted for %s", todo_id, owner_id)
