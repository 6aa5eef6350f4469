"""
Тесты клиентской части: TodoApiClient, QueryCache, TodoStore, group_by_category.

API-клиент ходит в приложение через тот же ASGITransport, что и test_client.
"""

import pytest
import pytest_asyncio

from todo_app.client import ApiError, QueryCache, TodoApiClient, TodoStore, group_by_category

PASSWORD = "correct horse battery"


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


@pytest_asyncio.fixture
async def api(test_client) -> TodoApiClient:
    client = TodoApiClient(client=test_client)
    await client.sign_up("Ann", "ann@example.com", PASSWORD)
    return client


@pytest_asyncio.fixture
async def store(api) -> TodoStore:
    return TodoStore(api)


# ============================================================================
# API CLIENT
# ============================================================================


@pytest.mark.asyncio
async def test_api_client_round_trip(api):
    work = await api.create_category("Work", "#ff0000")
    todo = await api.create_todo("Buy milk", category_ids=[work["id"]])

    updated = await api.update_todo(todo["id"], completed=True, category_ids=[])

    assert updated["completed"] is True
    assert updated["categories"] == []
    assert [t["id"] for t in await api.list_todos()] == [todo["id"]]

    assert await api.delete_todo(todo["id"]) == {"message": "Todo deleted successfully"}
    assert await api.list_todos() == []


@pytest.mark.asyncio
async def test_api_client_error(api):
    with pytest.raises(ApiError) as exc_info:
        await api.delete_todo(999)

    assert exc_info.value.status_code == 404
    assert exc_info.value.code == "NOT_FOUND"
    assert exc_info.value.message == "Task with id=999 not found"


@pytest.mark.asyncio
async def test_api_client_session(api):
    session = await api.get_session()
    assert session["user"]["email"] == "ann@example.com"

    await api.sign_out()
    api._client.cookies.clear()

    assert api.token is None
    with pytest.raises(ApiError) as exc_info:
        await api.list_todos()
    assert exc_info.value.status_code == 401


@pytest.mark.asyncio
async def test_api_client_hello(test_client):
    api = TodoApiClient(client=test_client)

    assert "message" in await api.hello()


# ============================================================================
# QUERY CACHE
# ============================================================================


@pytest.mark.asyncio
async def test_cache_fetches_once_until_stale():
    clock = FakeClock()
    calls = []

    async def fetch():
        calls.append(clock.now)
        return ["server"]

    cache = QueryCache(stale_after=30, clock=clock)
    cache.register("todos", fetch)

    assert await cache.get("todos") == ["server"]
    assert await cache.get("todos") == ["server"]
    assert len(calls) == 1

    clock.now += 30
    await cache.get("todos")
    assert len(calls) == 2


@pytest.mark.asyncio
async def test_cache_invalidate():
    calls = 0

    async def fetch():
        nonlocal calls
        calls += 1
        return calls

    cache = QueryCache()
    cache.register("todos", fetch)
    cache.register("categories", fetch)

    assert await cache.get("todos") == 1
    cache.invalidate("todos")
    assert cache.peek("todos") == 1
    assert cache.is_stale("todos")
    assert await cache.get("todos") == 2

    await cache.get("categories")
    cache.invalidate_all()
    assert cache.is_stale("todos") and cache.is_stale("categories")


def test_cache_unknown_key():
    with pytest.raises(KeyError, match="Unknown cache key"):
        QueryCache().peek("nope")


@pytest.mark.asyncio
async def test_mutate_applies_optimistic_value_before_request():
    server = ["a"]

    async def fetch():
        return list(server)

    cache = QueryCache()
    cache.register("todos", fetch)
    await cache.get("todos")

    seen_during_request = []

    async def request():
        seen_during_request.append(cache.peek("todos"))
        server.append("b")
        return "ok"

    result = await cache.mutate("todos", lambda current: [*current, "b?"], request)

    assert result == "ok"
    assert seen_during_request == [["a", "b?"]]
    assert cache.peek("todos") == ["a", "b"]


@pytest.mark.asyncio
async def test_mutate_failure_reconciles_and_reraises():
    async def fetch():
        return ["a"]

    async def request():
        raise RuntimeError("rejected")

    cache = QueryCache()
    cache.register("todos", fetch)
    await cache.get("todos")

    with pytest.raises(RuntimeError, match="rejected"):
        await cache.mutate("todos", lambda current: [], request)

    assert cache.peek("todos") == ["a"]
    assert not cache.is_stale("todos")


@pytest.mark.asyncio
async def test_mutate_refetch_failure_invalidates():
    async def fetch():
        raise ConnectionError("offline")

    async def request():
        return "ok"

    cache = QueryCache()
    cache.register("todos", fetch)
    cache.set("todos", ["local"])

    assert await cache.mutate("todos", lambda current: [*current, "new"], request) == "ok"

    assert cache.peek("todos") == ["local", "new"]
    assert cache.is_stale("todos")


# ============================================================================
# TODO STORE (optimistic updates against the real API)
# ============================================================================


@pytest.mark.asyncio
async def test_store_add_todo_ends_with_server_state(store):
    work = await store.create_category("Work", "#ff0000")
    await store.todos()

    created = await store.add_todo("Buy milk", category_ids=[work["id"]])

    todos = await store.todos()
    assert todos == await store.api.list_todos()
    assert [t["id"] for t in todos] == [created["id"]]
    assert created["id"] > 0
    assert todos[0]["categories"] == [{"id": work["id"], "name": "Work", "color": "#ff0000"}]


@pytest.mark.asyncio
async def test_store_rejected_add_rolls_back_to_server_state(store):
    await store.add_todo("Existing")

    with pytest.raises(ApiError) as exc_info:
        await store.add_todo("Bad", category_ids=[999])

    assert exc_info.value.status_code == 400
    assert [t["title"] for t in store.cache.peek("todos")] == ["Existing"]


@pytest.mark.asyncio
async def test_store_toggle_and_delete(store):
    todo = await store.add_todo("Task")

    await store.toggle_todo(todo["id"], True)
    assert (await store.todos())[0]["completed"] is True

    await store.delete_todo(todo["id"])
    assert await store.todos() == []


@pytest.mark.asyncio
async def test_store_rejected_toggle_restores_server_state(store):
    todo = await store.add_todo("Task")

    with pytest.raises(ApiError):
        await store.toggle_todo(todo["id"] + 100, True)

    assert [(t["id"], t["completed"]) for t in store.cache.peek("todos")] == [(todo["id"], False)]


@pytest.mark.asyncio
async def test_store_category_changes_refresh_todos(store):
    work = await store.create_category("Work")
    await store.add_todo("Task", category_ids=[work["id"]])

    await store.update_category(work["id"], name="Job")
    assert store.cache.peek("todos")[0]["categories"][0]["name"] == "Job"

    await store.delete_category(work["id"])
    assert store.cache.peek("todos")[0]["categories"] == []
    assert store.cache.peek("categories") == []


@pytest.mark.asyncio
async def test_store_grouped(store):
    work = await store.create_category("Work")
    await store.add_todo("Tagged", category_ids=[work["id"]])
    await store.add_todo("Loose")

    groups = await store.grouped()

    assert [(g.name, g.total_count) for g in groups] == [("Work", 1), ("Uncategorized", 1)]


# ============================================================================
# GROUPING
# ============================================================================


def todo(id, completed=False, *category_ids):
    return {
        "id": id,
        "title": f"Task {id}",
        "completed": completed,
        "categories": [{"id": cid} for cid in category_ids],
    }


CATEGORIES = [
    {"id": 1, "name": "work", "color": "#ff0000"},
    {"id": 2, "name": "Home", "color": "#00ff00"},
    {"id": 3, "name": "Empty", "color": "#0000ff"},
]


def test_group_by_category():
    todos = [todo(1, True, 1, 2), todo(2, False, 1), todo(3, True)]

    groups = group_by_category(todos, CATEGORIES)

    assert [g.name for g in groups] == ["Home", "work", "Uncategorized"]
    home, work, loose = groups
    assert [t["id"] for t in work.todos] == [1, 2]
    assert (work.completed_count, work.total_count) == (1, 2)
    assert [t["id"] for t in home.todos] == [1]
    assert (loose.category_id, loose.color) == (None, "#6b7280")
    assert (loose.completed_count, loose.total_count) == (1, 1)


def test_group_by_category_always_has_uncategorized():
    groups = group_by_category([], CATEGORIES)

    assert len(groups) == 1
    assert groups[0].name == "Uncategorized"
    assert groups[0].total_count == 0


def test_group_by_category_ignores_unknown_categories():
    groups = group_by_category([todo(1, False, 42)], CATEGORIES)

    assert [(g.name, g.total_count) for g in groups] == [("Uncategorized", 0)]
