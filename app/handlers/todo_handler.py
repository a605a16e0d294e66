from mangum import Mangum

from app.main import create_app
from app.routers.subscription_router import router as subscription_router
from app.routers.todo_router import router as todo_router

app = create_app(
    "Todo Lambda",
    [
        (todo_router, "/api/todos", "Todos"),
        (subscription_router, "/api/subscription", "Subscription"),
    ],
)

handler = Mangum(app)
