from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.identity import AuthenticatedUser, get_current_user
from app.schemas.user import SubscriptionOut
from app.services.user_service import UserService

router = APIRouter()
service = UserService()


@router.get("", response_model=SubscriptionOut)
async def get_subscription(
    user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await service.get_user(db, user.id)


# Called once billing has taken payment.
@router.post("", response_model=SubscriptionOut)
async def subscribe(
    user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await service.set_subscribed(db, user.id, True)
