"""
Identity-provider webhook ingestion.

Verifies svix-signed deliveries and provisions a ``User`` row for every
``user.created`` event. Other event types are acknowledged and ignored.
"""

import json
import logging
from typing import Mapping, Optional

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.ext.asyncio import AsyncSession
from svix.webhooks import Webhook, WebhookVerificationError

from app.config import get_settings
from app.exceptions import ConfigurationError, ValidationError
from app.models.user import User
from app.schemas.webhook import UserCreatedEvent, webhook_event_adapter
from app.services.user_service import UserService

logger = logging.getLogger(__name__)

SVIX_HEADERS = ("svix-id", "svix-timestamp", "svix-signature")


class WebhookService:
    def __init__(self):
        self.users = UserService()

    def verify(self, payload: str, headers: Mapping[str, str]) -> dict:
        """
        Check the delivery against the configured signing secret.

        Raises:
            ConfigurationError: WEBHOOK_SECRET is not set
            ValidationError: a svix header is missing or the signature/payload is bad
        """
        secret = get_settings().webhook_secret
        if not secret:
            raise ConfigurationError("Please add webhook secret in env", code="WEBHOOK_SECRET_MISSING")

        svix_headers = {name: headers.get(name) for name in SVIX_HEADERS}
        if not all(svix_headers.values()):
            raise ValidationError("Missing svix headers", code="MISSING_SVIX_HEADERS")

        # verify() only checks the signature; its return value differs across svix majors
        try:
            Webhook(secret).verify(payload, svix_headers)
        except WebhookVerificationError as exc:
            raise ValidationError("Invalid signature", code="INVALID_SIGNATURE") from exc

        try:
            return json.loads(payload)
        except json.JSONDecodeError as exc:
            raise ValidationError("Invalid payload", code="INVALID_PAYLOAD") from exc

    async def handle(self, db: AsyncSession, payload: str, headers: Mapping[str, str]) -> Optional[User]:
        """Verify and dispatch one delivery. Returns the provisioned user, if any."""
        body = self.verify(payload, headers)

        try:
            event = webhook_event_adapter.validate_python(body)
        except PydanticValidationError as exc:
            raise ValidationError("Invalid event payload", code="INVALID_EVENT") from exc

        if not isinstance(event, UserCreatedEvent):
            logger.info("Ignoring webhook event %s", event.type)
            return None

        email = event.data.primary_email()
        if email is None:
            raise ValidationError("No email found", code="NO_EMAIL", details={"user_id": event.data.id})

        logger.info("Primary email for %s: %s", event.data.id, email)
        user = await self.users.provision_user(db, event.data.id, email)
        logger.info("New user created: %s", user.id)
        return user
