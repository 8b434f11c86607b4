"""HTTP client for a running planner server."""

from __future__ import annotations

import time
from typing import Any, Dict, Iterable, List, Optional

import requests
from requests import Response
from requests.exceptions import ConnectionError, RequestException, Timeout

from process_planner.storage import AnnotationRecord


class PlannerClientError(Exception):
    """Raised when the planner server cannot be reached or fails a request."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class PlannerValidationError(PlannerClientError):
    """The server rejected the request body or parameters (HTTP 400)."""


def _detail(response: Response) -> str:
    """The API's `{"detail": ...}` message, or the raw body."""
    try:
        detail = response.json().get("detail")
    except (ValueError, AttributeError):
        detail = None
    return str(detail) if detail else response.text


class PlannerClient:
    """Small wrapper around the planner HTTP API.

    Reads and absolute sets are retried on timeouts and 5xx responses with
    exponential backoff. Increments and decrements are sent once: after a
    timeout the server may already have applied them.
    """

    def __init__(
        self,
        base_url: str = "http://localhost:8000",
        timeout: int = 10,
        max_retries: int = 3,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.max_retries = max_retries
        self._session = session or requests.Session()

    def get_counts(self, duration: str, ids: Optional[Iterable[str]] = None) -> Dict[str, int]:
        """Call `GET /api/counters`; listed ids are seeded server-side."""
        params = {"duration": duration}
        id_list = list(ids or [])
        if id_list:
            params["ids"] = ",".join(id_list)
        data = self._call("GET", "/api/counters", params=params)
        return data.get("counts") or {}

    def bump(self, detail_id: str, duration: str, action: str = "inc") -> None:
        """Increment ('inc') or decrement ('dec') one counter."""
        self._call(
            "POST",
            "/api/counters",
            retry=False,
            json={"detailId": detail_id, "duration": duration, "action": action},
        )

    def set_count(self, detail_id: str, duration: str, value: int) -> None:
        self._call(
            "POST",
            "/api/counters",
            json={"detailId": detail_id, "duration": duration, "action": "set", "value": value},
        )

    def list_annotations(self) -> List[AnnotationRecord]:
        data = self._call("GET", "/api/annotations")
        return [AnnotationRecord(**row) for row in data.get("rows", [])]

    def add_annotation(self, record: AnnotationRecord) -> None:
        """Upsert by detail_id; repeating it stores the same record."""
        payload = record.to_dict()
        payload.pop("created_at", None)
        self._call(
            "POST",
            "/api/annotations",
            json={key: value for key, value in payload.items() if value is not None},
        )

    def summary(self, ids: Optional[Iterable[str]] = None) -> Dict[str, Any]:
        id_list = list(ids or [])
        params = {"ids": ",".join(id_list)} if id_list else None
        return self._call("GET", "/api/summary", params=params)

    def backend(self) -> str:
        """Name of the storage backend the server picked ('sqlite' or 'json')."""
        data = self._call("GET", "/health", retry=False)
        if data.get("status") != "ok":
            raise PlannerClientError(f"Server unhealthy: {data}")
        return data.get("backend", "")

    def health_check(self) -> bool:
        try:
            self.backend()
        except PlannerClientError:
            return False
        return True

    def _call(self, method: str, endpoint: str, retry: bool = True, **kwargs) -> Dict[str, Any]:
        url = f"{self.base_url}{endpoint}"
        attempts = self.max_retries if retry else 1
        failure = PlannerClientError(f"No attempt made for {method} {endpoint}")

        for attempt in range(attempts):
            if attempt:
                time.sleep(2 ** (attempt - 1))
            try:
                response: Response = self._session.request(method, url, timeout=self.timeout, **kwargs)
            except Timeout:
                failure = PlannerClientError(f"{method} {endpoint} timed out after {self.timeout}s")
                continue
            except ConnectionError:
                raise PlannerClientError(f"Cannot connect to planner server at {self.base_url}")
            except RequestException as exc:
                raise PlannerClientError(f"{method} {endpoint} failed: {exc}")

            if response.status_code == 400:
                raise PlannerValidationError(f"Rejected by server: {_detail(response)}", 400)
            if response.status_code >= 500:
                failure = PlannerClientError(
                    f"Server error on {method} {endpoint} ({response.status_code}): {_detail(response)}",
                    response.status_code,
                )
                continue
            if response.status_code >= 400:
                raise PlannerClientError(
                    f"{method} {endpoint} returned {response.status_code}: {_detail(response)}",
                    response.status_code,
                )
            return response.json()

        raise failure
