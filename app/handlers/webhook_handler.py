from mangum import Mangum

from app.main import create_app
from app.routers.webhook_router import router as webhook_router

app = create_app("Webhook Lambda", [(webhook_router, "/api/webhook", "Webhook")])

handler = Mangum(app)
