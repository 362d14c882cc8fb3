"""HTTP client for the User Accounts API.

Wraps httpx with the API's envelope: successful calls return the ``data``
payload, failures raise ApiError. The client does not own any session
state. It asks a token provider for the current token and reports 401
responses through ``on_unauthorized``; what happens next is the session's
decision.
"""

import logging
from typing import Any, Callable, Optional

import httpx

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "http://localhost:8000"
API_TIMEOUT_SECONDS = 10.0


class ApiError(Exception):
    """Non-2xx response from the API."""

    def __init__(self, status_code: int, message: str, errors: list[dict] | None = None):
        self.status_code = status_code
        self.message = message
        self.errors = errors or []
        super().__init__(f"{status_code}: {message}")

    @property
    def is_unauthorized(self) -> bool:
        return self.status_code == 401


class AccountsClient:
    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        http_client: Optional[httpx.Client] = None,
        token_provider: Optional[Callable[[], Optional[str]]] = None,
        on_unauthorized: Optional[Callable[[ApiError], None]] = None,
    ):
        self._http = http_client or httpx.Client(base_url=base_url, timeout=API_TIMEOUT_SECONDS)
        self.token_provider = token_provider
        self.on_unauthorized = on_unauthorized

    def close(self) -> None:
        self._http.close()

    # ── transport ────────────────────────────────────────────

    def _headers(self) -> dict:
        headers = {"Accept": "application/json"}
        token = self.token_provider() if self.token_provider else None
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    def _request(self, method: str, path: str, **kwargs) -> Any:
        response = self._http.request(method, path, headers=self._headers(), **kwargs)

        try:
            body = response.json()
        except ValueError:
            body = {}

        if response.is_success:
            return body.get("data") if isinstance(body, dict) else None

        error = ApiError(
            status_code=response.status_code,
            message=body.get("message", response.reason_phrase) if isinstance(body, dict) else response.reason_phrase,
            errors=body.get("errors") if isinstance(body, dict) else None,
        )
        logger.debug("API request failed", extra={"path": path, "statusCode": response.status_code})
        if error.is_unauthorized and self.on_unauthorized:
            self.on_unauthorized(error)
        raise error

    # ── auth ─────────────────────────────────────────────────

    def register(
        self,
        first_name: str,
        last_name: str,
        email: str,
        password: str,
        phone: Optional[str] = None,
    ) -> dict:
        """Returns ``{"user": {...}, "token": "..."}``."""
        payload = {
            "firstName": first_name,
            "lastName": last_name,
            "email": email,
            "password": password,
        }
        if phone:
            payload["phone"] = phone
        return self._request("POST", "/api/auth/register", json=payload)

    def login(self, email: str, password: str) -> dict:
        """Returns ``{"user": {...}, "token": "..."}``."""
        return self._request("POST", "/api/auth/login", json={"email": email, "password": password})

    # ── users ────────────────────────────────────────────────

    def get_profile(self) -> dict:
        return self._request("GET", "/api/users/profile")

    def update_profile(self, **changes) -> dict:
        """Send only the given fields, e.g. ``update_profile(first_name="Ana")``."""
        names = {"first_name": "firstName", "last_name": "lastName", "phone": "phone", "password": "password"}
        payload = {names[k]: v for k, v in changes.items() if k in names}
        return self._request("PUT", "/api/users/profile", json=payload)

    def list_users(self, page: int = 1, limit: int = 10) -> dict:
        """Returns ``{"users": [...], "pagination": {...}}``."""
        return self._request("GET", "/api/users", params={"page": page, "limit": limit})

    def health(self) -> dict:
        return self._request("GET", "/api/health")
