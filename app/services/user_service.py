import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import ConflictError, UserNotFoundError
from app.models.user import User
from app.repositories.user_repo import UserRepository

logger = logging.getLogger(__name__)


class UserService:
    def __init__(self):
        self.repo = UserRepository()

    async def get_user(self, db: AsyncSession, user_id: str) -> User:
        user = await self.repo.get(db, user_id)
        if user is None:
            raise UserNotFoundError(user_id)
        return user

    async def provision_user(self, db: AsyncSession, user_id: str, email: str) -> User:
        """Insert a new unsubscribed user. Create-only: an existing id or email is a conflict."""
        try:
            user = await self.repo.create(db, User(id=user_id, email=email, is_subscribed=False))
            await db.commit()
        except IntegrityError as exc:
            await db.rollback()
            raise ConflictError(
                "User already exists",
                code="USER_CONFLICT",
                details={"user_id": user_id},
            ) from exc
        await db.refresh(user)
        return user

    async def set_subscribed(self, db: AsyncSession, user_id: str, subscribed: bool = True) -> User:
        user = await self.get_user(db, user_id)
        user.is_subscribed = subscribed
        await db.commit()
        await db.refresh(user)
        logger.info("User %s subscription set to %s", user_id, subscribed)
        return user
