from __future__ import annotations

import logging
from typing import Any, Iterable, List, Optional, Tuple

import httpx
from pydantic import ValidationError as PydanticValidationError

from taskboard import config
from taskboard.errors import (
    InvalidRequestError,
    NotFoundError,
    TransportError,
)
from taskboard.schemas import TaskRead, UserSummary

logger = logging.getLogger(__name__)


def _detail(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or response.reason_phrase
    if isinstance(body, dict) and body.get("detail"):
        return str(body["detail"])
    return response.reason_phrase


def _raise_for_status(response: httpx.Response) -> None:
    if response.is_success:
        return
    message = _detail(response)
    code = response.status_code
    if code == 404:
        raise NotFoundError(message, code)
    if code in (400, 409, 422):
        raise InvalidRequestError(message, code)
    raise TransportError(f"Unexpected response {code}: {message}", code)


class TaskApiClient:
    """
    Async client for the ``/api/tasks`` and ``/api/users`` endpoints.

    Every failure comes out as a ``TaskboardError`` subclass, so callers
    never handle httpx exceptions directly.
    """

    def __init__(
        self,
        base_url: str = config.API_BASE_URL,
        *,
        timeout: float = config.REQUEST_TIMEOUT_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._http = httpx.AsyncClient(base_url=base_url, timeout=timeout, transport=transport)

    async def __aenter__(self) -> "TaskApiClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    async def _request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        try:
            response = await self._http.request(method, url, **kwargs)
        except httpx.HTTPError as exc:
            logger.warning("%s %s failed: %s", method, url, exc)
            raise TransportError(f"{method} {url} failed: {exc}") from exc
        _raise_for_status(response)
        return response

    @staticmethod
    def _json(response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError as exc:
            raise TransportError(f"Response is not JSON: {exc}", response.status_code) from exc

    @staticmethod
    def _parse(model: Any, payload: Any) -> Any:
        try:
            return model.model_validate(payload)
        except PydanticValidationError as exc:
            raise TransportError(f"Unexpected response payload: {exc}") from exc

    # --- Tasks ---

    async def list_tasks(self, owner_id: Optional[int] = None) -> List[TaskRead]:
        params = {"owner_id": owner_id} if owner_id is not None else None
        response = await self._request("GET", "/api/tasks", params=params)
        return [self._parse(TaskRead, item) for item in self._json(response)]

    async def get_task(self, task_id: int) -> TaskRead:
        response = await self._request("GET", f"/api/tasks/{task_id}")
        return self._parse(TaskRead, self._json(response))

    async def create_task(self, dto: dict) -> TaskRead:
        response = await self._request("POST", "/api/tasks", json=dto)
        return self._parse(TaskRead, self._json(response))

    async def update_task(self, task_id: int, dto: dict) -> Optional[TaskRead]:
        """Returns the stored task, or ``None`` when the server sends no content."""
        response = await self._request("PUT", f"/api/tasks/{task_id}", json=dto)
        if response.status_code == 204 or not response.content:
            return None
        return self._parse(TaskRead, self._json(response))

    async def delete_task(self, task_id: int) -> None:
        await self._request("DELETE", f"/api/tasks/{task_id}")

    async def reorder_tasks(self, pairs: Iterable[Tuple[int, int]]) -> None:
        payload = [{"id": task_id, "order": order} for task_id, order in pairs]
        await self._request("PATCH", "/api/tasks/reorder", json=payload)

    async def toggle_task(self, task_id: int, is_completed: bool) -> TaskRead:
        response = await self._request("PATCH", f"/api/tasks/{task_id}/toggle", json=is_completed)
        return self._parse(TaskRead, self._json(response))

    # --- Users ---

    async def list_users(self) -> List[UserSummary]:
        response = await self._request("GET", "/api/users")
        return [self._parse(UserSummary, item) for item in self._json(response)]

    async def create_user(self, dto: dict) -> UserSummary:
        response = await self._request("POST", "/api/users", json=dto)
        return self._parse(UserSummary, self._json(response))

    async def update_user(self, user_id: int, dto: dict) -> None:
        await self._request("PUT", f"/api/users/{user_id}", json=dto)

    async def delete_user(self, user_id: int) -> None:
        await self._request("DELETE", f"/api/users/{user_id}")
