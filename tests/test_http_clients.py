"""Tests for HTTP-based adapters."""

import asyncio
import json
from dataclasses import dataclass, field

import httpx
import pytest

from ums_client.adapters.supabase_asset_store import SupabaseAssetStore
from ums_client.adapters.user_api_client import HttpxUserApiClient, serialize_fields
from ums_client.domain.models import UserRecord
from ums_client.domain.uploads import UploadCompleted, UploadFailed, UploadProgress
from ums_client.errors import MutationError, NetworkError


@dataclass
class _FakeBucket:
    bucket: str

    def get_public_url(self, path: str) -> str:
        base = "https://example.supabase.co/storage/v1/object/public"
        return f"{base}/{self.bucket}/{path}"


@dataclass
class _FakeStorage:
    buckets: list[str] = field(default_factory=list)

    def from_(self, bucket: str) -> _FakeBucket:
        self.buckets.append(bucket)
        return _FakeBucket(bucket)


@dataclass
class _FakeSupabase:
    storage: _FakeStorage = field(default_factory=_FakeStorage)


def _user_client(handler) -> HttpxUserApiClient:  # type: ignore[no-untyped-def]
    transport = httpx.MockTransport(handler)
    return HttpxUserApiClient(
        base_url="https://backend.test",
        http_client=httpx.AsyncClient(transport=transport),
    )


def _asset_store(handler, max_bytes: int = 1024) -> SupabaseAssetStore:  # type: ignore[no-untyped-def]
    transport = httpx.MockTransport(handler)
    return SupabaseAssetStore(
        client=_FakeSupabase(),  # type: ignore[arg-type]
        http_client=httpx.AsyncClient(transport=transport),
        supabase_url="https://example.supabase.co",
        supabase_key="anon-key",
        bucket="avatars",
        max_bytes=max_bytes,
        chunk_bytes=4,
    )


async def _collect(store: SupabaseAssetStore, data: bytes, name: str) -> list:  # type: ignore[type-arg]
    handle = store.begin_upload(data, name)
    return [event async for event in handle.events()]


def test_serialize_fields_uses_backend_keys() -> None:
    assert serialize_fields(
        {"username": "bob", "profile_picture_url": "https://store/img"}
    ) == {"username": "bob", "profilePictureUrl": "https://store/img"}


def test_update_user_posts_payload_and_parses_record() -> None:
    seen: dict[str, object] = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["method"] = request.method
        seen["path"] = request.url.path
        seen["body"] = json.loads(request.content.decode())
        return httpx.Response(
            200,
            json={
                "_id": "u-1",
                "username": "bob",
                "email": "b@x.com",
                "profilePicture": "https://store/img",
                "createdAt": "2024-01-01",
            },
        )

    client = _user_client(handler)

    user = asyncio.run(
        client.update_user(
            "u-1", {"username": "bob", "profile_picture_url": "https://store/img"}
        )
    )

    assert seen == {
        "method": "POST",
        "path": "/api/user/update/u-1",
        "body": {"username": "bob", "profilePictureUrl": "https://store/img"},
    }
    assert user == UserRecord(
        id="u-1",
        username="bob",
        email="b@x.com",
        profile_picture_url="https://store/img",
    )


def test_update_user_raises_server_message() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(400, json={"message": "email taken"})

    client = _user_client(handler)

    with pytest.raises(MutationError) as excinfo:
        asyncio.run(client.update_user("u-1", {"email": "taken@x.com"}))

    assert excinfo.value.message == "email taken"
    assert excinfo.value.status_code == 400


def test_update_user_falls_back_when_body_is_not_json() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, content=b"<html>oops</html>")

    client = _user_client(handler)

    with pytest.raises(MutationError, match="Failed to update profile"):
        asyncio.run(client.update_user("u-1", {"username": "bob"}))


def test_transport_failure_becomes_network_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    client = _user_client(handler)

    with pytest.raises(NetworkError):
        asyncio.run(client.sign_out())


def test_sign_out_accepts_any_response() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/api/auth/signout"
        return httpx.Response(500)

    client = _user_client(handler)

    asyncio.run(client.sign_out())


def test_list_and_delete_users() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.method == "DELETE":
            assert request.url.path == "/api/admin/delete-user/u-2"
            return httpx.Response(200, json={"message": "deleted"})
        return httpx.Response(
            200,
            json={
                "users": [
                    {"_id": "u-1", "username": "ann", "email": "ann@x.com"},
                    {"_id": "u-2", "username": "ben", "email": "ben@x.com"},
                ]
            },
        )

    client = _user_client(handler)

    users = asyncio.run(client.list_users())
    asyncio.run(client.delete_user("u-2"))

    assert [user.username for user in users] == ["ann", "ben"]
    assert users[0].profile_picture_url is None


def test_sign_in_parses_user() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert json.loads(request.content.decode()) == {
            "email": "ann@x.com",
            "password": "pw",
        }
        return httpx.Response(
            200, json={"id": "u-1", "username": "ann", "email": "ann@x.com"}
        )

    client = _user_client(handler)

    user = asyncio.run(client.sign_in("ann@x.com", "pw"))

    assert user.id == "u-1"


def test_asset_store_streams_progress_then_url() -> None:
    received: dict[str, object] = {}

    def handler(request: httpx.Request) -> httpx.Response:
        received["path"] = request.url.path
        received["body"] = request.content
        received["auth"] = request.headers["authorization"]
        return httpx.Response(200, json={"Key": "avatars/1me.png"})

    store = _asset_store(handler)

    events = asyncio.run(_collect(store, b"0123456789", "1me.png"))

    assert events == [
        UploadProgress(4, 10),
        UploadProgress(8, 10),
        UploadProgress(10, 10),
        UploadCompleted(
            "https://example.supabase.co/storage/v1/object/public/avatars/1me.png"
        ),
    ]
    assert received == {
        "path": "/storage/v1/object/avatars/1me.png",
        "body": b"0123456789",
        "auth": "Bearer anon-key",
    }


def test_asset_store_rejects_oversized_object_without_request() -> None:
    calls: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(200)

    store = _asset_store(handler, max_bytes=5)

    events = asyncio.run(_collect(store, b"0123456789", "1big.png"))

    assert len(events) == 1
    assert isinstance(events[0], UploadFailed)
    assert "limit is 5 bytes" in events[0].cause
    assert calls == []


def test_asset_store_reports_server_rejection() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(413, json={"error": "Payload too large"})

    store = _asset_store(handler)

    events = asyncio.run(_collect(store, b"01234567", "1me.png"))

    assert isinstance(events[-1], UploadFailed)
    assert sum(isinstance(event, UploadFailed) for event in events) == 1


@dataclass
class _BrokenBucket:
    def get_public_url(self, path: str) -> str:
        raise RuntimeError("bucket misconfigured")


@dataclass
class _BrokenStorage:
    def from_(self, bucket: str) -> _BrokenBucket:
        return _BrokenBucket()


def test_asset_store_reports_unexpected_error_as_failure() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"Key": "avatars/1me.png"})

    store = _asset_store(handler)
    store.client = _FakeSupabase(storage=_BrokenStorage())  # type: ignore[arg-type]

    events = asyncio.run(_collect(store, b"01234567", "1me.png"))

    assert isinstance(events[-1], UploadFailed)
    assert events[-1].cause == "bucket misconfigured"
    terminal = [e for e in events if isinstance(e, (UploadFailed, UploadCompleted))]
    assert len(terminal) == 1
