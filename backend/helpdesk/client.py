# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261019v1
# ---------------------------------------------------------------------------
"""
Minimal API client for the cookie-session API.

* Keeps the session cookie in the underlying ``httpx.Client`` jar, so every
  call after ``login`` is credentialed.
* Upper-cases ``priority`` / ``workType`` before submitting a ticket.
* Raises :class:`ApiError` on any non-2xx answer, carrying status, body and
  URL; its message is the server's ``message`` field when there is one.

Usage::

    client = HelpdeskClient("http://localhost:3001")
    client.login("admin", "changeme")
    page = client.list_tickets(page=1, page_size=50)
"""

from typing import Any, Dict, Iterable, Optional, Tuple

import httpx

_ENUM_FIELDS = ("priority", "workType")


class ApiError(Exception):
    def __init__(self, status: int, body: Any, url: str):
        self.status = status
        self.body = body
        self.url = url
        message = None
        if isinstance(body, dict):
            message = body.get("message")
        super().__init__(message or f"Request failed with status {status}")


def normalize_ticket_payload(payload: Dict[str, Any]) -> Dict[str, Any]:
    """Copy of *payload* with enum fields upper-cased; empty enums are dropped."""
    normalized = dict(payload)
    for key in _ENUM_FIELDS:
        value = normalized.get(key)
        if value:
            normalized[key] = str(value).upper()
        else:
            normalized.pop(key, None)
    return normalized


class HelpdeskClient:
    def __init__(self, base_url: str = "/api", http: Optional[httpx.Client] = None, timeout: float = 30.0):
        self.base_url = base_url.rstrip("/")
        self.http = http if http is not None else httpx.Client(timeout=timeout)

    def close(self) -> None:
        self.http.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()

    # -- core -----------------------------------------------------------------

    def _url(self, path: str) -> str:
        if path.startswith("http"):
            return path
        return f"{self.base_url}{path}"

    def request(
        self,
        method: str,
        path: str,
        data: Any = None,
        query: Optional[Dict[str, Any]] = None,
        files: Optional[Iterable[Tuple[str, Any]]] = None,
    ) -> Any:
        url = self._url(path)
        params = {k: str(v) for k, v in (query or {}).items() if v is not None}
        kwargs: Dict[str, Any] = {"params": params}
        if files is not None:
            kwargs["files"] = list(files)
        elif data is not None:
            kwargs["json"] = data

        res = self.http.request(method, url, **kwargs)

        if res.status_code == 204:
            return None

        is_json = "application/json" in res.headers.get("Content-Type", "")
        if is_json:
            try:
                body = res.json()
            except ValueError:
                body = {}
        else:
            body = res.text

        if not res.is_success:
            raise ApiError(res.status_code, body, str(res.request.url))
        return body

    # -- auth -----------------------------------------------------------------

    def login(self, username: str, password: str) -> Any:
        return self.request("POST", "/auth/login", {"username": username, "password": password})

    def logout(self) -> Any:
        return self.request("POST", "/auth/logout")

    def me(self) -> Any:
        return self.request("GET", "/auth/me")

    # -- tickets --------------------------------------------------------------

    def list_tickets(self, page: Optional[int] = None, page_size: Optional[int] = None) -> Any:
        return self.request("GET", "/tickets", query={"page": page, "pageSize": page_size})

    def get_ticket(self, ticket_id: int) -> Any:
        return self.request("GET", f"/tickets/{ticket_id}")

    def create_ticket(self, payload: Dict[str, Any]) -> Any:
        return self.request("POST", "/tickets", normalize_ticket_payload(payload))

    def update_ticket(self, ticket_id: int, payload: Dict[str, Any]) -> Any:
        return self.request("PUT", f"/tickets/{ticket_id}", normalize_ticket_payload(payload))

    def delete_ticket(self, ticket_id: int) -> None:
        self.request("DELETE", f"/tickets/{ticket_id}")

    # -- uploads --------------------------------------------------------------

    def upload(self, files: Iterable[Tuple[str, bytes, str]]) -> Any:
        """*files* is an iterable of ``(filename, content, mime_type)``."""
        parts = [("files", (name, content, mime)) for name, content, mime in files]
        return self.request("POST", "/uploads", files=parts)
