"""Community Sport API client.

This module defines a small client around the Community Sport REST API
(``/api/v1``).  It uses the ``requests`` library internally and every
high‑level method returns a ``(data, error)`` tuple: ``data`` is the
parsed JSON response on success, ``error`` is ``None``; on failure
``data`` is empty and ``error`` is a dictionary with ``status_code``,
``kind`` and ``message``.

The client keeps the signed‑in user in an :class:`AuthSession`.  Views
subscribe to the session to learn when the user or role changes:

* :meth:`CommunitySportClient.login` and :meth:`CommunitySportClient.register`
  store the returned token and notify subscribers.
* :meth:`CommunitySportClient.logout` clears the session and notifies
  subscribers with ``(None, None)``.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple

import requests


logger = logging.getLogger(__name__)

ApiError = Dict[str, Any]
AuthListener = Callable[[Optional[Dict[str, Any]], Optional[str]], None]


@dataclass
class AuthSession:
    """Signed‑in user, role claim and bearer token.

    Subscribers are called synchronously, in subscription order, with
    ``(user, role)`` whenever the session changes.  ``user`` is a
    dictionary with ``uid`` and ``email`` or ``None`` when signed out.
    """

    user: Optional[Dict[str, Any]] = None
    role: Optional[str] = None
    token: Optional[str] = None
    _listeners: List[AuthListener] = field(default_factory=list, repr=False)

    def subscribe(self, callback: AuthListener) -> Callable[[], None]:
        """Register ``callback`` and return a function that removes it."""
        self._listeners.append(callback)

        def unsubscribe() -> None:
            if callback in self._listeners:
                self._listeners.remove(callback)

        return unsubscribe

    def set(self, user: Optional[Dict[str, Any]], role: Optional[str], token: Optional[str]) -> None:
        self.user = user
        self.role = role
        self.token = token
        self._notify()

    def clear(self) -> None:
        self.set(None, None, None)

    def _notify(self) -> None:
        # Copy so a listener may unsubscribe while being notified.
        for callback in list(self._listeners):
            callback(self.user, self.role)

    def is_authenticated(self) -> bool:
        return self.user is not None and self.token is not None

    def has_role(self, role: str) -> bool:
        return self.is_authenticated() and self.role == role


class CommunitySportClient:
    """Client for the Community Sport API.

    Args:
        base_url: Base URL of the server, e.g. ``http://localhost:8000``.
        api_prefix: Path prefix of the versioned API.
        session: Optional requests session.  If not supplied a session
            is created automatically.
        auth: Optional :class:`AuthSession` shared with the UI.
    """

    def __init__(
        self,
        *,
        base_url: str,
        api_prefix: str = "/api/v1",
        session: Optional[requests.Session] = None,
        auth: Optional[AuthSession] = None,
        timeout: float = 15,
    ) -> None:
        self.base_url = base_url.rstrip("/") + api_prefix
        self.session = session or requests.Session()
        self.auth = auth or AuthSession()
        self.timeout = timeout

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------
    def _request(
        self, method: str, path: str, *, params: Dict[str, Any] | None = None,
        json_body: Any | None = None
    ) -> Tuple[Optional[Any], Optional[ApiError]]:
        """Perform an HTTP request to the API.

        Returns:
            A tuple ``(data, error)``.  ``error`` carries ``status_code``,
            ``kind`` and ``message`` from the server's error detail when
            the request fails.
        """
        url = f"{self.base_url}{path}"
        headers: Dict[str, str] = {}
        if self.auth.token:
            headers["Authorization"] = f"Bearer {self.auth.token}"
        try:
            logger.debug("Sending %s request to %s", method, url)
            response = self.session.request(
                method=method,
                url=url,
                params=params,
                json=json_body,
                headers=headers,
                timeout=self.timeout,
            )
            response.raise_for_status()
            if response.content:
                return response.json(), None
            return None, None
        except requests.HTTPError as exc:
            status = exc.response.status_code if exc.response is not None else None
            kind = None
            message = ""
            if exc.response is not None:
                try:
                    body = exc.response.json()
                except ValueError:
                    body = exc.response.text
                # Gateways and proxies may answer with any JSON shape
                detail = body.get("detail", body) if isinstance(body, dict) else body
                if isinstance(detail, dict):
                    kind = detail.get("kind")
                    message = detail.get("message") or ""
                elif isinstance(detail, list) and isinstance(body, dict):
                    kind = "validation"
                    message = "; ".join(
                        str(item.get("msg", item)) if isinstance(item, dict) else str(item) for item in detail
                    )
                elif detail:
                    message = detail if isinstance(detail, str) else json.dumps(detail)
            if not message:
                message = str(exc)
            logger.error("API request failed (%s): %s", status, message)
            return None, {"status_code": status, "kind": kind, "message": message}
        except requests.RequestException as exc:
            logger.error("API request failed: %s", exc)
            return None, {"status_code": None, "kind": "upstream", "message": str(exc)}

    # ------------------------------------------------------------------
    # Authentication
    # ------------------------------------------------------------------
    def _start_session(self, data: Dict[str, Any]) -> None:
        user = {"uid": data.get("uid"), "email": data.get("email")}
        self.auth.set(user, data.get("role"), data.get("access_token"))

    def register(
        self, email: str, password: str, role: Optional[str] = None
    ) -> Tuple[Optional[Dict[str, Any]], Optional[ApiError]]:
        """Create an account and sign in as it."""
        payload: Dict[str, Any] = {"email": email, "password": password}
        if role is not None:
            payload["role"] = role
        data, error = self._request("POST", "/auth/register", json_body=payload)
        if error:
            return None, error
        self._start_session(data)
        return data, None

    def login(
        self, email: str, password: str, expected_role: Optional[str] = None
    ) -> Tuple[Optional[Dict[str, Any]], Optional[ApiError]]:
        """Sign in.  ``expected_role`` restricts sign‑in to a role portal."""
        payload: Dict[str, Any] = {"email": email, "password": password}
        if expected_role is not None:
            payload["expected_role"] = expected_role
        data, error = self._request("POST", "/auth/login", json_body=payload)
        if error:
            return None, error
        self._start_session(data)
        return data, None

    def logout(self) -> None:
        self.auth.clear()

    def get_my_role(self) -> Tuple[Optional[Dict[str, Any]], Optional[ApiError]]:
        return self._request("GET", "/users/me/role")

    def set_user_role(self, uid: str, role: str) -> Tuple[Optional[Dict[str, Any]], Optional[ApiError]]:
        """Assign ``role`` to ``uid``; refreshes the session when ``uid`` is the signed‑in user."""
        data, error = self._request("PUT", f"/users/{uid}/role", json_body={"role": role})
        if error:
            return None, error
        if self.auth.user and self.auth.user.get("uid") == uid:
            self.auth.set(self.auth.user, data.get("role"), self.auth.token)
        return data, None

    # ------------------------------------------------------------------
    # Catalog
    # ------------------------------------------------------------------
    def list_programs(self) -> Tuple[List[Dict[str, Any]], Optional[ApiError]]:
        data, error = self._request("GET", "/programs/")
        if error:
            return [], error
        return data or [], None

    def search_programs(
        self,
        *,
        query: Optional[str] = None,
        sport: Optional[str] = None,
        age_group: Optional[str] = None,
        max_cost: Optional[Any] = None,
        accessibility: Optional[List[str]] = None,
    ) -> Tuple[List[Dict[str, Any]], Optional[ApiError]]:
        """Search the catalog.  Unset filters are left out of the query."""
        params: Dict[str, Any] = {
            "query": query,
            "sport": sport,
            "ageGroup": age_group,
            "maxCost": max_cost,
            "accessibility": accessibility or None,
        }
        params = {key: value for key, value in params.items() if value not in (None, "")}
        data, error = self._request("GET", "/programs/search", params=params)
        if error:
            return [], error
        return data or [], None

    def featured_programs(self, limit: Optional[int] = None) -> Tuple[List[Dict[str, Any]], Optional[ApiError]]:
        params = {"limit": limit} if limit is not None else None
        data, error = self._request("GET", "/programs/featured", params=params)
        if error:
            return [], error
        return data or [], None

    def catalog_options(self) -> Tuple[Dict[str, Any], Optional[ApiError]]:
        data, error = self._request("GET", "/programs/options")
        if error:
            return {}, error
        return data or {}, None

    def get_program(self, program_id: str) -> Tuple[Optional[Dict[str, Any]], Optional[ApiError]]:
        return self._request("GET", f"/programs/{program_id}")

    def create_program(self, payload: Dict[str, Any]) -> Tuple[Optional[Dict[str, Any]], Optional[ApiError]]:
        return self._request("POST", "/programs/", json_body=payload)

    def clear_cache(self) -> Tuple[Optional[Dict[str, Any]], Optional[ApiError]]:
        return self._request("POST", "/programs/cache/clear")

    def get_faqs(self) -> Tuple[List[Dict[str, Any]], Optional[ApiError]]:
        data, error = self._request("GET", "/faqs/")
        if error:
            return [], error
        return data or [], None

    def create_faq(self, payload: Dict[str, Any]) -> Tuple[Optional[Dict[str, Any]], Optional[ApiError]]:
        return self._request("POST", "/faqs/", json_body=payload)

    # ------------------------------------------------------------------
    # Appointments
    # ------------------------------------------------------------------
    def book_appointment(
        self, program_id: str, time_slot: List[str]
    ) -> Tuple[Optional[Dict[str, Any]], Optional[ApiError]]:
        """Book ``program_id`` for the signed‑in user."""
        payload = {"program_id": program_id, "time_slot": time_slot}
        return self._request("POST", "/appointments/", json_body=payload)

    def my_appointments(self) -> Tuple[List[Dict[str, Any]], Optional[ApiError]]:
        data, error = self._request("GET", "/appointments/")
        if error:
            return [], error
        return (data or {}).get("appointments", []), None

    def update_appointment(
        self, appointment_id: str, time_slot: List[str]
    ) -> Tuple[Optional[Dict[str, Any]], Optional[ApiError]]:
        return self._request("PUT", f"/appointments/{appointment_id}", json_body={"time_slot": time_slot})

    def cancel_appointment(self, appointment_id: str) -> Tuple[Optional[Dict[str, Any]], Optional[ApiError]]:
        return self._request("POST", f"/appointments/{appointment_id}/cancel", json_body={})
