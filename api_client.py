"""Async HTTP client for the task-list API."""
from __future__ import annotations

import logging
import os
from typing import Any, Dict, List, Optional

import httpx

from errors import (
    ERRORS_BY_CODE, AuthenticationError, Conflict, Forbidden, NotFound,
    TodoError, TransportError, ValidationError,
)

logger = logging.getLogger(__name__)

API_URL = os.getenv("TODO_API_URL", "http://localhost:3000/api")

_ERRORS_BY_STATUS = {
    400: ValidationError,
    401: AuthenticationError,
    403: Forbidden,
    404: NotFound,
    409: Conflict,
    422: ValidationError,
}


def error_from_response(resp: httpx.Response) -> TodoError:
    """Build the TodoError matching a non-2xx response."""
    try:
        body = resp.json()
    except ValueError:
        body = {}
    if not isinstance(body, dict):
        body = {}
    message = body.get("message") or body.get("detail") or resp.reason_phrase
    if not isinstance(message, str):
        # FastAPI request validation returns a list of problems under "detail"
        message = "Invalid request"
    cls = ERRORS_BY_CODE.get(body.get("error_code")) or _ERRORS_BY_STATUS.get(resp.status_code, TransportError)
    return cls(message)


class ApiClient:
    """Thin coroutine wrapper around the HTTP API.

    Every method raises a TodoError subclass on failure; network problems
    surface as TransportError. There is no automatic retry.
    """

    def __init__(
        self,
        base_url: str = API_URL,
        token: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: float = 10.0,
    ):
        self.token = token
        self._http = httpx.AsyncClient(base_url=base_url.rstrip("/"), transport=transport, timeout=timeout)

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, *exc) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    async def _request(self, method: str, path: str, json: Any = None) -> Any:
        headers = {"Authorization": f"Bearer {self.token}"} if self.token else {}
        logger.debug("%s %s", method, path)
        try:
            resp = await self._http.request(method, path, json=json, headers=headers)
        except httpx.HTTPError as e:
            raise TransportError(f"{method} {path} failed: {e}") from e
        if resp.is_error:
            raise error_from_response(resp)
        if resp.status_code == 204 or not resp.content:
            return None
        return resp.json()

    # --- Auth ---

    async def register(self, username: str, password: str) -> Dict:
        data = await self._request("POST", "/auth/register", {"username": username, "password": password})
        self.token = data["token"]
        return data

    async def login(self, username: str, password: str) -> Dict:
        data = await self._request("POST", "/auth/login", {"username": username, "password": password})
        self.token = data["token"]
        return data

    async def me(self) -> Dict:
        return await self._request("GET", "/auth/me")

    # --- Lists ---

    async def get_lists(self) -> List[Dict]:
        return await self._request("GET", "/lists")

    async def create_list(self, name: str) -> Dict:
        return await self._request("POST", "/lists", {"name": name})

    async def update_list(self, list_id: str, name: str) -> Dict:
        return await self._request("PUT", f"/lists/{list_id}", {"name": name})

    async def delete_list(self, list_id: str) -> None:
        await self._request("DELETE", f"/lists/{list_id}")

    # --- Tasks ---

    async def get_tasks(self, list_id: str) -> List[Dict]:
        return await self._request("GET", f"/lists/{list_id}/tasks")

    async def get_important_tasks(self) -> List[Dict]:
        return await self._request("GET", "/tasks/important")

    async def create_task(self, list_id: str, title: str) -> Dict:
        return await self._request("POST", f"/lists/{list_id}/tasks", {"title": title})

    async def update_task(self, task_id: str, updates: Dict) -> Dict:
        return await self._request("PATCH", f"/tasks/{task_id}", updates)

    async def delete_task(self, task_id: str) -> None:
        await self._request("DELETE", f"/tasks/{task_id}")

    async def reorder_tasks(self, list_id: str, task_orders: List[Dict]) -> None:
        await self._request("PATCH", f"/lists/{list_id}/tasks/reorder", {"taskOrders": task_orders})
