"""
Application exceptions.

Services raise these; the handler registered in ``app.main`` turns them
into JSON error responses using ``status_code``.
"""

from typing import Any, Optional


class TodoAppError(Exception):
    """Base exception for all application errors."""

    status_code = 500

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


class ConfigurationError(TodoAppError):
    """Required configuration is missing. Fatal for the request."""

    status_code = 500


class AuthenticationError(TodoAppError):
    status_code = 401


class AuthorizationError(TodoAppError):
    status_code = 403


class ValidationError(TodoAppError):
    status_code = 400


class NotFoundError(TodoAppError):
    status_code = 404


class ConflictError(TodoAppError):
    status_code = 409


class FreeTierLimitError(AuthorizationError):
    """Raised when an unsubscribed user tries to go past the free todo allowance."""

    def __init__(self, limit: int, user_id: str):
        super().__init__(
            f"Free plan allows at most {limit} todos. Subscribe to add more.",
            code="FREE_TIER_LIMIT_REACHED",
            details={"limit": limit, "user_id": user_id},
        )


class TodoNotFoundError(NotFoundError):
    def __init__(self, todo_id: str):
        super().__init__(
            "Todo not found",
            code="TODO_NOT_FOUND",
            details={"todo_id": todo_id},
        )


class UserNotFoundError(NotFoundError):
    def __init__(self, user_id: str):
        super().__init__(
            "User not found",
            code="USER_NOT_FOUND",
            details={"user_id": user_id},
        )
