import logging

from fastapi import APIRouter, FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from app.config import get_settings
from app.exceptions import TodoAppError
from app.gateway import AccessControlMiddleware
from app.identity import IdentityProvider
from app.models import todo, user  # noqa: F401  register mappers
from app.routers import subscription_router, todo_router, webhook_router

logger = logging.getLogger(__name__)


def configure_logging() -> None:
    logging.basicConfig(
        level=get_settings().log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


async def handle_app_error(request: Request, exc: TodoAppError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s on %s: %s", exc.code, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def handle_db_error(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.error("Datastore error on %s", request.url.path, exc_info=exc)
    return JSONResponse(
        status_code=500,
        content={"error": "DATABASE_ERROR", "message": "Datastore request failed", "details": {}},
    )


def create_app(title: str, routes: list[tuple[APIRouter, str, str]]) -> FastAPI:
    """Build an app with the access-control gateway and error handling around ``routes``."""
    app = FastAPI(title=title)
    app.state.identity = IdentityProvider()
    app.add_middleware(AccessControlMiddleware)
    app.add_exception_handler(TodoAppError, handle_app_error)
    app.add_exception_handler(SQLAlchemyError, handle_db_error)

    for router, prefix, tag in routes:
        app.include_router(router, prefix=prefix, tags=[tag])

    # Root health
    @app.get("/")
    async def read_root():
        return {"status": "ok"}

    return app


configure_logging()

app = create_app(
    "Todo API",
    [
        (todo_router.router, "/api/todos", "Todos"),
        (subscription_router.router, "/api/subscription", "Subscription"),
        (webhook_router.router, "/api/webhook", "Webhook"),
    ],
)
