"""HTTP client for the Taskboard JSON API.

Wraps ``httpx.Client`` with bearer-token auth, a default timeout and typed
errors, so scripts and tests can drive a running server without touching
raw responses.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0


class ApiError(Exception):
    """Non-2xx response from the API."""

    def __init__(self, message: str, status: int, data: Any = None):
        super().__init__(message)
        self.message = message
        self.status = status
        self.data = data


class NetworkError(Exception):
    """Connection-level failure before any response arrived."""

    def __init__(self, message: str, *, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.cause = cause


class RequestTimeout(NetworkError):
    pass


def _error_message(data: Any, fallback: str) -> str:
    if isinstance(data, dict):
        for key in ("error", "detail", "message"):
            value = data.get(key)
            if isinstance(value, str) and value:
                return value
    return fallback


class TaskboardClient:
    def __init__(
        self,
        base_url: str = "",
        *,
        timeout: float = DEFAULT_TIMEOUT,
        token: Optional[str] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.token = token
        self._client = httpx.Client(base_url=base_url, timeout=timeout, transport=transport)

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "TaskboardClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        params: Optional[Dict[str, Any]] = None,
        require_auth: bool = False,
    ) -> Any:
        headers: Dict[str, str] = {}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        elif require_auth:
            raise ApiError("Authentication required", 401)

        try:
            response = self._client.request(method, path, json=json, params=params, headers=headers)
        except httpx.TimeoutException as exc:
            raise RequestTimeout("Request timeout", cause=exc) from exc
        except httpx.TransportError as exc:
            logger.warning("taskboard request failed method=%s path=%s", method, path)
            raise NetworkError(f"Network error: {exc}", cause=exc) from exc

        try:
            data = response.json() if response.content else None
        except ValueError:
            data = response.text

        if response.is_error:
            raise ApiError(
                _error_message(data, response.reason_phrase or "Request failed"),
                response.status_code,
                data,
            )
        return data

    # -- tasks -------------------------------------------------------------

    def list_tasks(
        self,
        *,
        status: Optional[str] = None,
        sort_by: Optional[str] = None,
        sort_order: Optional[str] = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> Dict[str, Any]:
        params = {
            "status": status,
            "sortBy": sort_by,
            "sortOrder": sort_order,
            "limit": limit,
            "offset": offset,
        }
        return self._request("GET", "/api/tasks", params={k: v for k, v in params.items() if v is not None})

    def get_task(self, task_id: str) -> Dict[str, Any]:
        return self._request("GET", f"/api/tasks/{task_id}")

    def create_task(self, title: str, description: Optional[str] = None, due_date: Optional[str] = None) -> Dict[str, Any]:
        body: Dict[str, Any] = {"title": title}
        if description is not None:
            body["description"] = description
        if due_date is not None:
            body["dueDate"] = due_date
        return self._request("POST", "/api/tasks", json=body)

    def update_task(self, task_id: str, **fields: Any) -> Dict[str, Any]:
        """Send only the given fields; ``due_date`` is sent as ``dueDate``."""
        if "due_date" in fields:
            fields["dueDate"] = fields.pop("due_date")
        return self._request("PUT", f"/api/tasks/{task_id}", json=fields)

    def delete_task(self, task_id: str) -> Dict[str, Any]:
        return self._request("DELETE", f"/api/tasks/{task_id}")

    # -- auth --------------------------------------------------------------

    def register(self, email: str, password: str) -> Dict[str, Any]:
        return self._request("POST", "/api/auth/register", json={"email": email, "password": password})

    def login(self, email: str, password: str) -> Dict[str, Any]:
        data = self._request("POST", "/api/auth/login", json={"email": email, "password": password})
        self.token = data.get("token")
        return data

    def logout(self) -> Dict[str, Any]:
        try:
            return self._request("POST", "/api/auth/logout")
        finally:
            self.token = None

    def validate(self) -> Dict[str, Any]:
        return self._request("POST", "/api/auth/validate", require_auth=True)
