"""
Dashboard client.

Drives the todo API the way the dashboard does: every mutation is followed
by a re-fetch of the current page, and failures become notifications in
the returned state instead of exceptions. State is immutable; each call
takes the current ``DashboardState`` and returns the next one.
"""

import logging
from typing import Literal, Optional

import httpx
from pydantic import BaseModel, ConfigDict, Field

from app.config import get_settings
from app.schemas.todo import TodoOut, TodoPage

logger = logging.getLogger(__name__)


class Notification(BaseModel):
    model_config = ConfigDict(frozen=True)

    level: Literal["success", "error"]
    message: str


class DashboardState(BaseModel):
    model_config = ConfigDict(frozen=True)

    todos: tuple[TodoOut, ...] = ()
    current_page: int = 1
    total_pages: int = 1
    search: str = ""
    is_subscribed: bool = False
    is_loading: bool = True
    notifications: tuple[Notification, ...] = ()
    free_todo_limit: int = Field(default_factory=lambda: get_settings().free_todo_limit)

    @property
    def limit_reached(self) -> bool:
        return not self.is_subscribed and len(self.todos) >= self.free_todo_limit

    def notify(self, level: Literal["success", "error"], message: str) -> "DashboardState":
        return self.model_copy(update={"notifications": self.notifications + (Notification(level=level, message=message),)})


class DashboardClient:
    def __init__(self, http: httpx.AsyncClient):
        self.http = http

    async def load(self, state: DashboardState, page: Optional[int] = None) -> DashboardState:
        page = state.current_page if page is None else page
        try:
            response = await self.http.get("/api/todos", params={"page": page, "search": state.search})
            response.raise_for_status()
            data = TodoPage.model_validate(response.json())
        except (httpx.HTTPError, ValueError) as e:
            logger.warning("Failed to fetch todos: %s", e)
            return state.model_copy(update={"is_loading": False}).notify("error", "Failed to fetch todos")

        return state.model_copy(
            update={
                "todos": tuple(data.todos),
                "current_page": data.current_page,
                "total_pages": data.total_pages,
                "is_loading": False,
            }
        ).notify("success", "Todos fetched successfully!")

    async def search(self, state: DashboardState, term: str) -> DashboardState:
        return await self.load(state.model_copy(update={"search": term}), page=1)

    async def refresh_subscription(self, state: DashboardState) -> DashboardState:
        try:
            response = await self.http.get("/api/subscription")
        except httpx.HTTPError as e:
            logger.warning("Failed to fetch subscription: %s", e)
            return state
        if response.is_success:
            return state.model_copy(update={"is_subscribed": bool(response.json().get("isSubscribed"))})
        return state

    async def _mutate(
        self,
        state: DashboardState,
        request: httpx.Request,
        success: str,
        failure: str,
    ) -> DashboardState:
        try:
            response = await self.http.send(request)
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.warning("%s: %s", failure, e)
            return state.notify("error", failure)

        state = await self.load(state)
        return state.notify("success", success)

    async def add_todo(self, state: DashboardState, title: str) -> DashboardState:
        request = self.http.build_request("POST", "/api/todos", json={"title": title})
        return await self._mutate(state, request, "Todo added successfully!", "Failed to add todo. Please try again")

    async def update_todo(self, state: DashboardState, todo_id: str, completed: bool) -> DashboardState:
        request = self.http.build_request("PUT", f"/api/todos/{todo_id}", json={"completed": completed})
        return await self._mutate(state, request, "Todo updated successfully!", "Failed to update Todo")

    async def delete_todo(self, state: DashboardState, todo_id: str) -> DashboardState:
        request = self.http.build_request("DELETE", f"/api/todos/{todo_id}")
        return await self._mutate(state, request, "Todo deleted successfully!", "Failed to delete Todo")
