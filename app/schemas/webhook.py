"""
Identity-provider webhook envelopes.

Events are parsed into a tagged union on ``type``: ``user.created`` gets a
strict schema, every other type is kept as an opaque ``UnhandledEvent``.
"""

from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Discriminator, Field, Tag, TypeAdapter

USER_CREATED = "user.created"


class EmailAddress(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    email_address: str = Field(min_length=1)


class UserCreatedData(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str = Field(min_length=1)
    email_addresses: list[EmailAddress] = Field(default_factory=list)
    primary_email_address_id: Optional[str] = None

    def primary_email(self) -> Optional[str]:
        """Address matching the primary pointer, else the first one listed."""
        for address in self.email_addresses:
            if address.id == self.primary_email_address_id:
                return address.email_address
        if self.email_addresses:
            return self.email_addresses[0].email_address
        return None


class UserCreatedEvent(BaseModel):
    model_config = ConfigDict(extra="ignore")

    type: Literal["user.created"]
    data: UserCreatedData


class UnhandledEvent(BaseModel):
    model_config = ConfigDict(extra="ignore")

    type: str
    data: Any = None


def _event_tag(value: Any) -> str:
    if isinstance(value, dict):
        event_type = value.get("type")
    else:
        event_type = getattr(value, "type", None)
    return USER_CREATED if event_type == USER_CREATED else "unhandled"


WebhookEvent = Annotated[
    Union[
        Annotated[UserCreatedEvent, Tag(USER_CREATED)],
        Annotated[UnhandledEvent, Tag("unhandled")],
    ],
    Discriminator(_event_tag),
]

webhook_event_adapter: TypeAdapter[WebhookEvent] = TypeAdapter(WebhookEvent)
