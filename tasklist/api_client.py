"""Task source collaborators: the protocol the manager consumes and a REST client."""

from __future__ import annotations

import logging
from typing import Any, Protocol

import httpx

logger = logging.getLogger(__name__)


class TaskApiError(RuntimeError):
    """A task source call failed (transport, HTTP status or payload)."""


class TaskSource(Protocol):
    """The three calls the task list manager makes against its backend."""

    def fetch_all_tasks(self) -> list[dict]: ...

    def create_task_record(self, fields: dict) -> dict: ...

    def update_task_record(self, fields: dict) -> dict: ...


class TaskApiClient:
    """Client for a JSON task endpoint (``/tasks`` and ``/tasks/{id}``)."""

    def __init__(
        self,
        base_url: str,
        token: str | None = None,
        timeout: float = 30.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        headers = {"Content-Type": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        self._client = httpx.Client(
            base_url=self.base_url,
            headers=headers,
            timeout=timeout,
            transport=transport,
        )

    def _request(self, method: str, path: str, payload: dict | None = None) -> Any:
        """Send a request and return the decoded JSON body (None if empty)."""
        try:
            resp = self._client.request(method, path, json=payload)
            resp.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise TaskApiError(
                f"{method} {path} returned {e.response.status_code}: {e.response.text.strip()}"
            ) from e
        except httpx.HTTPError as e:
            raise TaskApiError(f"{method} {path} failed: {e}") from e
        if not resp.content:
            return None
        try:
            return resp.json()
        except ValueError as e:
            raise TaskApiError(f"{method} {path} returned invalid JSON") from e

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def fetch_all_tasks(self) -> list[dict]:
        """Fetch every task record. Unrecognized payloads yield an empty list."""
        body = self._request("GET", "/tasks")
        if isinstance(body, dict):
            body = body.get("data", body.get("tasks"))
        if not isinstance(body, list):
            logger.warning("Task listing was not a list; treating as empty")
            return []
        logger.debug("Fetched %d task record(s)", len(body))
        return body

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------

    def create_task_record(self, fields: dict) -> dict:
        """Create a task. Returns the stored record, including its new id."""
        return self._record(self._request("POST", "/tasks", fields))

    def update_task_record(self, fields: dict) -> dict:
        """Replace a task record. ``fields`` must carry the task id."""
        task_id = fields.get("id")
        if task_id is None:
            raise TaskApiError("Cannot update a task record without an id")
        return self._record(self._request("PUT", f"/tasks/{task_id}", fields))

    @staticmethod
    def _record(body: Any) -> dict:
        if body is None:
            return {}
        if isinstance(body, dict) and isinstance(body.get("data"), dict):
            return body["data"]
        if not isinstance(body, dict):
            raise TaskApiError(f"Expected a task record, got {type(body).__name__}")
        return body

    def close(self) -> None:
        """Close the HTTP client."""
        self._client.close()

    def __enter__(self) -> TaskApiClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
