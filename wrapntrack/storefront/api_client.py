# wrapntrack/storefront/api_client.py
import logging
import os
from typing import Any

import httpx

from wrapntrack.storefront.session import SessionManager

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "http://localhost:5000"


class ApiError(Exception):
    """
    A failed backend call.

    status_code is None for transport failures (no response at all).
    message is the server-provided text when there was one.
    """

    def __init__(self, status_code: int | None, message: str | None):
        super().__init__(message or f"HTTP {status_code}")
        self.status_code = status_code
        self.message = message


def server_message(response: httpx.Response) -> str | None:
    """
    Pull a human readable message out of an error body.

    Accepts {"message": ...} and FastAPI's {"detail": ...}, where detail
    may itself be a string, a {"message": ...} object or a list of
    validation errors.
    """
    try:
        body = response.json()
    except ValueError:
        return None
    if not isinstance(body, dict):
        return None
    if isinstance(body.get("message"), str):
        return body["message"]
    detail = body.get("detail")
    if isinstance(detail, str):
        return detail
    if isinstance(detail, dict) and isinstance(detail.get("message"), str):
        return detail["message"]
    if isinstance(detail, list) and detail and isinstance(detail[0], dict):
        return detail[0].get("msg")
    return None


class ApiClient:
    """
    Shared request client for the storefront.

    Attaches the session's bearer token to every call and turns
    non-2xx answers into ApiError. Pass `http` to reuse an existing
    httpx.Client (for example a FastAPI TestClient).
    """

    def __init__(
        self,
        session: SessionManager,
        base_url: str | None = None,
        http: httpx.Client | None = None,
        timeout: float = 15.0,
    ):
        self.session = session
        self.http = http or httpx.Client(
            base_url=base_url or os.getenv("STOREFRONT_API_URL", DEFAULT_API_URL),
            timeout=timeout,
        )

    def _headers(self) -> dict[str, str]:
        token = self.session.token
        return {"Authorization": f"Bearer {token}"} if token else {}

    def request(self, method: str, path: str, json: Any = None, params: dict | None = None) -> Any:
        try:
            response = self.http.request(
                method, path, json=json, params=params, headers=self._headers()
            )
        except httpx.HTTPError as exc:
            logger.warning("%s %s failed: %s", method, path, exc)
            raise ApiError(None, None) from exc

        if response.is_error:
            message = server_message(response)
            logger.info("%s %s -> %s %s", method, path, response.status_code, message)
            raise ApiError(response.status_code, message)

        if not response.content:
            return {}
        return response.json()

    def get(self, path: str, params: dict | None = None) -> Any:
        return self.request("GET", path, params=params)

    def post(self, path: str, json: Any = None) -> Any:
        return self.request("POST", path, json=json)

    def put(self, path: str, json: Any = None) -> Any:
        return self.request("PUT", path, json=json)

    def delete(self, path: str, json: Any = None) -> Any:
        return self.request("DELETE", path, json=json)

    def close(self) -> None:
        self.http.close()
