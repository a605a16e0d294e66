import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import PlainTextResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.exceptions import ConflictError, ValidationError
from app.services.webhook_service import WebhookService

logger = logging.getLogger(__name__)

router = APIRouter()
service = WebhookService()


@router.post("/register", response_class=PlainTextResponse)
async def register(request: Request, db: AsyncSession = Depends(get_db)):
    payload = (await request.body()).decode("utf-8", errors="replace")
    try:
        await service.handle(db, payload, request.headers)
    except ValidationError as e:
        logger.warning("Rejected webhook delivery: %s", e.message)
        return PlainTextResponse(e.message, status_code=400)
    except (ConflictError, SQLAlchemyError):
        logger.exception("Error creating user in DB")
        return PlainTextResponse("Error creating user", status_code=500)

    return PlainTextResponse("Webhook received successfully", status_code=200)
