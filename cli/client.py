"""
ComplaintDesk API client used by the CLI.

Every call carries the stored bearer token. Any 401 means the session is
no longer usable: the stored token is deleted and SessionExpiredError is
raised so the user is sent back to ``login``.
"""

from typing import Optional, Dict, Any, List

import httpx

from cli.auth import SessionStore
from cli.config import CLIConfig


class APIError(Exception):
    """Error response from the API (or no response at all)"""

    def __init__(self, message: str, status_code: Optional[int] = None, code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.code = code


class NotAuthenticatedError(APIError):
    """No stored session"""

    def __init__(self, message: str = "Not logged in"):
        super().__init__(message, status_code=401, code="NOT_LOGGED_IN")


class SessionExpiredError(APIError):
    """The API rejected the stored session; it has been discarded"""


def _error_from(response: httpx.Response) -> APIError:
    try:
        body = response.json()
    except ValueError:
        return APIError(response.text or f"HTTP {response.status_code}", response.status_code)

    error = body.get("error") if isinstance(body, dict) else None
    if isinstance(error, dict):
        return APIError(error.get("message", "Request failed"), response.status_code, error.get("code"))
    detail = body.get("detail") if isinstance(body, dict) else None
    return APIError(str(detail or "Request failed"), response.status_code)


class ComplaintAPI:
    """Thin async wrapper over the REST API"""

    def __init__(
        self,
        config: CLIConfig,
        session: SessionStore,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.config = config
        self.session = session
        self._transport = transport

    async def _request(
        self,
        method: str,
        path: str,
        *,
        json: Optional[Dict[str, Any]] = None,
        auth: bool = True,
    ) -> Any:
        headers: Dict[str, str] = {}
        if auth:
            if not self.session.is_authenticated:
                raise NotAuthenticatedError()
            headers.update(self.session.auth_headers())

        try:
            async with httpx.AsyncClient(
                base_url=self.config.api_base_url,
                timeout=self.config.timeout,
                transport=self._transport,
            ) as client:
                response = await client.request(method, path, json=json, headers=headers)
        except httpx.ConnectError:
            raise APIError("Cannot connect to server. Is the backend running?")
        except httpx.RequestError as e:
            raise APIError(f"Request failed: {e}")

        if response.status_code == 401:
            error = _error_from(response)
            self.session.clear()
            if auth:
                raise SessionExpiredError(
                    "Session expired or invalid. Please log in again.",
                    status_code=401,
                    code=error.code,
                )
            raise error

        if response.status_code >= 400:
            raise _error_from(response)

        return response.json()

    # ========== Auth ==========

    async def signup(self, email: str, password: str) -> Dict[str, Any]:
        data = await self._request(
            "POST", "/auth/signup", json={"email": email, "password": password}, auth=False
        )
        self.session.save(data["token"], data["user"])
        return data["user"]

    async def login(self, email: str, password: str) -> Dict[str, Any]:
        data = await self._request(
            "POST", "/auth/login", json={"email": email, "password": password}, auth=False
        )
        self.session.save(data["token"], data["user"])
        return data["user"]

    async def logout(self) -> None:
        """End the session server-side; the local copy is dropped regardless"""
        try:
            await self._request("POST", "/auth/logout")
        finally:
            self.session.clear()

    async def profile(self) -> Dict[str, Any]:
        return await self._request("GET", "/auth/profile")

    # ========== Complaints ==========

    async def list_complaints(self) -> List[Dict[str, Any]]:
        return await self._request("GET", "/complaints")

    async def get_complaint(self, complaint_id: str) -> Dict[str, Any]:
        return await self._request("GET", f"/complaints/{complaint_id}")

    async def create_complaint(self, title: str, description: str, category: str) -> Dict[str, Any]:
        return await self._request(
            "POST",
            "/complaints",
            json={"title": title, "description": description, "category": category},
        )

    async def update_complaint(self, complaint_id: str, **fields: Any) -> Dict[str, Any]:
        patch = {k: v for k, v in fields.items() if v is not None}
        return await self._request("PUT", f"/complaints/{complaint_id}", json=patch)

    async def update_status(self, complaint_id: str, status: str) -> Dict[str, Any]:
        return await self._request(
            "PUT", f"/complaints/{complaint_id}/status", json={"status": status}
        )

    async def delete_complaint(self, complaint_id: str) -> Dict[str, Any]:
        return await self._request("DELETE", f"/complaints/{complaint_id}")
