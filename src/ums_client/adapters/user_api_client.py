"""User-record service client."""

from dataclasses import dataclass
from typing import Protocol

import httpx
from pydantic import ValidationError

from ums_client.domain.models import UserPayload, UserRecord
from ums_client.errors import MutationError, NetworkError

_PAYLOAD_KEYS = {
    "username": "username",
    "email": "email",
    "password": "password",
    "profile_picture_url": "profilePictureUrl",
}


class UserApiClient(Protocol):
    """Interface for the backend user and auth endpoints."""

    async def update_user(self, user_id: str, fields: dict[str, str]) -> UserRecord:
        """Apply a partial update and return the full updated record."""

    async def sign_in(self, email: str, password: str) -> UserRecord:
        """Authenticate and return the signed-in user."""

    async def sign_out(self) -> None:
        """End the backend session."""

    async def list_users(self) -> list[UserRecord]:
        """Return every user record (admin only)."""

    async def delete_user(self, user_id: str) -> None:
        """Delete a user record (admin only)."""


@dataclass
class HttpxUserApiClient(UserApiClient):
    """HTTPX-backed client for the user-record service.

    One AsyncClient is shared by every call so backend session cookies persist
    between sign-in, updates and sign-out.
    """

    base_url: str
    http_client: httpx.AsyncClient
    timeout: float = 10.0

    @classmethod
    def create(cls, base_url: str, timeout: float = 10.0) -> "HttpxUserApiClient":
        """Create a client with a managed httpx session."""
        return cls(base_url=base_url, http_client=httpx.AsyncClient(), timeout=timeout)

    async def update_user(self, user_id: str, fields: dict[str, str]) -> UserRecord:
        """POST a partial update to /api/user/update/{id}."""
        response = await self._send(
            "POST",
            f"/api/user/update/{user_id}",
            json=serialize_fields(fields),
        )
        _raise_for_mutation(response, "Failed to update profile")
        return _parse_user(response.json())

    async def sign_in(self, email: str, password: str) -> UserRecord:
        """POST credentials to /api/auth/signin."""
        response = await self._send(
            "POST", "/api/auth/signin", json={"email": email, "password": password}
        )
        _raise_for_mutation(response, "Failed to sign in")
        return _parse_user(response.json())

    async def sign_out(self) -> None:
        """GET /api/auth/signout; any HTTP response counts as signed out."""
        await self._send("GET", "/api/auth/signout")

    async def list_users(self) -> list[UserRecord]:
        """GET /api/admin/get-users."""
        response = await self._send("GET", "/api/admin/get-users")
        _raise_for_mutation(response, "Failed to fetch users")
        payload = response.json()
        return [_parse_user(row) for row in payload.get("users", [])]

    async def delete_user(self, user_id: str) -> None:
        """DELETE /api/admin/delete-user/{id}."""
        response = await self._send("DELETE", f"/api/admin/delete-user/{user_id}")
        _raise_for_mutation(response, "Failed to delete user")

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()

    async def _send(
        self, method: str, path: str, json: dict[str, object] | None = None
    ) -> httpx.Response:
        url = f"{self.base_url}{path}"
        try:
            return await self.http_client.request(
                method, url, json=json, timeout=self.timeout
            )
        except httpx.TransportError as exc:
            raise NetworkError(f"{method} {path} failed: {exc}") from exc


def serialize_fields(fields: dict[str, str]) -> dict[str, str]:
    """Map draft field names onto the backend's JSON keys."""
    return {_PAYLOAD_KEYS[name]: value for name, value in fields.items()}


def _raise_for_mutation(response: httpx.Response, fallback: str) -> None:
    if response.is_success:
        return
    message = fallback
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and body.get("message"):
        message = str(body["message"])
    raise MutationError(message, response.status_code)


def _parse_user(raw: object) -> UserRecord:
    try:
        return UserPayload.model_validate(raw).to_record()
    except ValidationError as exc:
        raise MutationError("Malformed user record from server", 502) from exc
