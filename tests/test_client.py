import httpx
import pytest

from app.client import DashboardClient, DashboardState
from app.config import get_settings
from support import add_todos, add_user, auth_headers

pytestmark = pytest.mark.anyio


@pytest.fixture
def dashboard(client) -> DashboardClient:
    client.headers.update(auth_headers("user_alice"))
    return DashboardClient(client)


async def test_load_fills_state(dashboard, db_session):
    await add_user(db_session, "user_alice", "alice@example.com")
    await add_todos(db_session, "user_alice", ["Buy milk", "Walk the dog"])

    state = await dashboard.load(DashboardState())
    assert [t.title for t in state.todos] == ["Walk the dog", "Buy milk"]
    assert state.total_pages == 1
    assert state.is_loading is False
    assert [n.message for n in state.notifications] == ["Todos fetched successfully!"]


async def test_add_refetches_and_notifies(dashboard, db_session):
    await add_user(db_session, "user_alice", "alice@example.com")
    before = await dashboard.load(DashboardState())

    after = await dashboard.add_todo(before, "Buy milk")
    assert [t.title for t in after.todos] == ["Buy milk"]
    assert after.notifications[-1].level == "success"
    assert before.todos == ()


async def test_update_and_delete_round_trip(dashboard, db_session):
    await add_user(db_session, "user_alice", "alice@example.com")
    (todo,) = await add_todos(db_session, "user_alice", ["Buy milk"])
    state = await dashboard.load(DashboardState())

    state = await dashboard.update_todo(state, todo.id, True)
    assert state.todos[0].completed is True

    state = await dashboard.delete_todo(state, todo.id)
    assert state.todos == ()
    assert [n.message for n in state.notifications] == [
        "Todos fetched successfully!",
        "Todos fetched successfully!",
        "Todo updated successfully!",
        "Todos fetched successfully!",
        "Todo deleted successfully!",
    ]


async def test_failed_mutation_becomes_error_notification(dashboard, db_session):
    await add_user(db_session, "user_alice", "alice@example.com")
    state = await dashboard.load(DashboardState())

    state = await dashboard.delete_todo(state, "does-not-exist")
    assert state.notifications[-1].level == "error"
    assert state.notifications[-1].message == "Failed to delete Todo"


async def test_search_resets_to_first_page(dashboard, db_session):
    await add_user(db_session, "user_alice", "alice@example.com", subscribed=True)
    await add_todos(db_session, "user_alice", [f"task {i}" for i in range(15)] + ["Buy milk"])

    state = await dashboard.load(DashboardState(), page=2)
    assert state.current_page == 2

    state = await dashboard.search(state, "MILK")
    assert state.current_page == 1
    assert [t.title for t in state.todos] == ["Buy milk"]


async def test_limit_reached_for_free_user(dashboard, db_session):
    await add_user(db_session, "user_alice", "alice@example.com")
    await add_todos(db_session, "user_alice", ["one", "two", "three"])

    state = await dashboard.refresh_subscription(DashboardState())
    state = await dashboard.load(state)
    assert state.is_subscribed is False
    assert state.limit_reached is True


async def test_fetch_failure_is_terminal_state():
    transport = httpx.MockTransport(lambda request: httpx.Response(500))
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as http:
        state = await DashboardClient(http).load(DashboardState())

    assert state.is_loading is False
    assert state.notifications[-1].message == "Failed to fetch todos"


async def test_limit_follows_settings(monkeypatch):
    monkeypatch.setenv("FREE_TODO_LIMIT", "5")
    get_settings.cache_clear()

    assert DashboardState().free_todo_limit == 5
    assert DashboardState(todos=(), is_subscribed=False).limit_reached is False
