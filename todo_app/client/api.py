"""
Async HTTP client for the to-do API.

    async with TodoApiClient("http://localhost:8000") as api:
        await api.sign_in("ann@example.com", "correct horse")
        todo = await api.create_todo("Buy milk", category_ids=[1])
        await api.update_todo(todo["id"], completed=True)

Responses are returned as decoded JSON (camelCase keys, as on the wire).
"""

from typing import Any

import httpx

from ..core.logging import get_logger

logger = get_logger(__name__)

# Python keyword -> JSON field for partial updates
_WIRE_NAMES = {"category_ids": "categoryIds"}


class ApiError(Exception):
    """Non-2xx response. payload is the decoded error body (or raw text)."""

    def __init__(self, status_code: int, payload: Any):
        self.status_code = status_code
        self.payload = payload
        super().__init__(f"API Error: {status_code} {self.code or ''}".rstrip())

    @property
    def code(self) -> str | None:
        if isinstance(self.payload, dict):
            return (self.payload.get("error") or {}).get("code")
        return None

    @property
    def message(self) -> str | None:
        if isinstance(self.payload, dict):
            return (self.payload.get("error") or {}).get("message")
        return None


class TodoApiClient:
    """
    Thin wrapper over httpx.AsyncClient.

    Args:
        base_url: server root, e.g. "http://localhost:8000"
        token: session token sent as Bearer; set automatically by sign_in/sign_up
        client: ready httpx.AsyncClient (tests pass one bound to ASGITransport);
            the caller stays responsible for closing it
    """

    def __init__(
        self,
        base_url: str = "http://localhost:8000",
        token: str | None = None,
        client: httpx.AsyncClient | None = None,
        timeout: float = 10.0,
    ):
        self.token = token
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(base_url=base_url, timeout=timeout)

    async def __aenter__(self) -> "TodoApiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def _request(self, method: str, path: str, json: Any = None) -> Any:
        headers = {"Authorization": f"Bearer {self.token}"} if self.token else {}
        response = await self._client.request(method, f"/api{path}", json=json, headers=headers)

        if response.is_error:
            try:
                payload = response.json()
            except ValueError:
                payload = response.text
            logger.debug(
                "API request failed",
                extra={"method": method, "path": path, "status": response.status_code},
            )
            raise ApiError(response.status_code, payload)

        return response.json()

    @staticmethod
    def _changes(fields: dict[str, Any]) -> dict[str, Any]:
        return {_WIRE_NAMES.get(name, name): value for name, value in fields.items()}

    # ------------------------------------------------------------------
    # auth
    # ------------------------------------------------------------------

    async def sign_up(self, name: str, email: str, password: str) -> dict:
        data = await self._request(
            "POST", "/auth/sign-up/email", {"name": name, "email": email, "password": password}
        )
        self.token = data["token"]
        return data

    async def sign_in(self, email: str, password: str) -> dict:
        data = await self._request(
            "POST", "/auth/sign-in/email", {"email": email, "password": password}
        )
        self.token = data["token"]
        return data

    async def sign_out(self) -> dict:
        data = await self._request("POST", "/auth/sign-out")
        self.token = None
        return data

    async def get_session(self) -> dict | None:
        return await self._request("GET", "/auth/get-session")

    # ------------------------------------------------------------------
    # todos
    # ------------------------------------------------------------------

    async def list_todos(self) -> list[dict]:
        return await self._request("GET", "/todos")

    async def create_todo(
        self,
        title: str,
        description: str | None = None,
        category_ids: list[int] | None = None,
    ) -> dict:
        body: dict[str, Any] = {"title": title}
        if description is not None:
            body["description"] = description
        if category_ids is not None:
            body["categoryIds"] = category_ids
        return await self._request("POST", "/todos", body)

    async def update_todo(self, todo_id: int, **fields: Any) -> dict:
        """
        Partial update: only the keywords passed are sent.

            await api.update_todo(3, completed=True)
            await api.update_todo(3, category_ids=[])    # detach all
            await api.update_todo(3, description=None)   # clear
        """
        return await self._request("PUT", f"/todos/{todo_id}", self._changes(fields))

    async def delete_todo(self, todo_id: int) -> dict:
        return await self._request("DELETE", f"/todos/{todo_id}")

    # ------------------------------------------------------------------
    # categories
    # ------------------------------------------------------------------

    async def list_categories(self) -> list[dict]:
        return await self._request("GET", "/categories")

    async def create_category(self, name: str, color: str | None = None) -> dict:
        body = {"name": name}
        if color is not None:
            body["color"] = color
        return await self._request("POST", "/categories", body)

    async def update_category(self, category_id: int, **fields: Any) -> dict:
        return await self._request("PUT", f"/categories/{category_id}", self._changes(fields))

    async def delete_category(self, category_id: int) -> dict:
        return await self._request("DELETE", f"/categories/{category_id}")

    async def hello(self) -> dict:
        return await self._request("GET", "/hello")
