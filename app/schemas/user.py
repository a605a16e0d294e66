from pydantic import ConfigDict

from app.schemas.todo import CamelModel


class SubscriptionOut(CamelModel):
    model_config = ConfigDict(from_attributes=True)

    is_subscribed: bool
