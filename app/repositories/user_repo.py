from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.user import User
from app.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    def __init__(self) -> None:
        super().__init__(User)

    def locking_select(self, user_id: str) -> Select:
        return select(User).where(User.id == user_id).with_for_update()

    async def get_for_update(self, db: AsyncSession, user_id: str) -> User | None:
        """Load the user holding a row lock until the transaction ends (no-op on SQLite)."""
        res = await db.execute(self.locking_select(user_id))
        return res.scalars().first()
