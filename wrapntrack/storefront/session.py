# wrapntrack/storefront/session.py
"""
Client-side session state.

Everything the storefront remembers between screens (the signed-in
customer, their tokens, the cached staff user and the UI theme) goes
through one SessionManager instance created at application start and
handed to every component that needs it.
"""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

SESSION_KEYS = ("customer", "customerToken", "token", "user", "theme")
AUTH_KEYS = ("customer", "customerToken", "token", "user")


class SessionManager:
    """
    Owner of the cached session keys.

    Values are plain JSON-compatible objects. When `path` is given the
    keys are restored from that file on construction and written back
    on every change. Cached values are never authoritative: server
    responses win whenever they are available.
    """

    def __init__(self, path: str | Path | None = None):
        self.path = Path(path) if path else None
        self._data: dict[str, Any] = {}
        if self.path and self.path.exists():
            self._restore()

    def _restore(self) -> None:
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            logger.warning("Ignoring unreadable session file %s", self.path)
            return
        self._data = {k: raw[k] for k in SESSION_KEYS if k in raw}

    def _persist(self) -> None:
        if not self.path:
            return
        self.path.write_text(json.dumps(self._data), encoding="utf-8")

    # ---- raw access ----

    def get(self, key: str, default: Any = None) -> Any:
        if key not in SESSION_KEYS:
            raise KeyError(key)
        return self._data.get(key, default)

    def set(self, key: str, value: Any) -> None:
        if key not in SESSION_KEYS:
            raise KeyError(key)
        if value is None:
            self._data.pop(key, None)
        else:
            self._data[key] = value
        self._persist()

    # ---- auth ----

    def login_customer(self, token: str, customer: dict[str, Any]) -> None:
        self._data["customerToken"] = token
        self._data["customer"] = {**customer, "source": "customer"}
        self._persist()

    def clear_auth(self) -> None:
        """Drop every auth key; the theme survives a logout."""
        for key in AUTH_KEYS:
            self._data.pop(key, None)
        self._persist()

    @property
    def token(self) -> str | None:
        return self._data.get("customerToken") or self._data.get("token")

    @property
    def customer(self) -> dict[str, Any] | None:
        return self._data.get("customer")

    @property
    def is_customer(self) -> bool:
        customer = self.customer
        return bool(customer and customer.get("source") == "customer" and self.token)

    @property
    def email(self) -> str | None:
        customer = self.customer or {}
        return customer.get("email") or customer.get("email_address")
