"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from ums_client.adapters.supabase_asset_store import SupabaseAssetStore
from ums_client.adapters.user_api_client import HttpxUserApiClient, UserApiClient
from ums_client.config import Settings, normalize_base_url
from ums_client.services.admin import AdminService
from ums_client.services.auth import AuthService
from ums_client.services.profile import ProfileEditor
from ums_client.services.session import SessionStore
from ums_client.services.uploads import AssetStore


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    session: SessionStore
    api_client: UserApiClient
    asset_store: AssetStore
    auth_service: AuthService
    admin_service: AdminService
    profile_editor: ProfileEditor
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_key
    )
    session = SessionStore()
    api_client = HttpxUserApiClient.create(
        base_url=normalize_base_url(resolved_settings.backend_url),
        timeout=resolved_settings.request_timeout_seconds,
    )
    asset_store = SupabaseAssetStore.create(
        client=supabase_client,
        supabase_url=normalize_base_url(resolved_settings.supabase_url),
        supabase_key=resolved_settings.supabase_key,
        bucket=resolved_settings.storage_bucket,
        max_bytes=resolved_settings.max_upload_bytes,
        chunk_bytes=resolved_settings.upload_chunk_bytes,
    )
    profile_editor = ProfileEditor.create(
        session=session, api_client=api_client, asset_store=asset_store
    )

    async def close_resources() -> None:
        await profile_editor.close()
        await api_client.close()
        await asset_store.close()

    return AppContainer(
        settings=resolved_settings,
        session=session,
        api_client=api_client,
        asset_store=asset_store,
        auth_service=AuthService(api_client=api_client, session=session),
        admin_service=AdminService(api_client=api_client),
        profile_editor=profile_editor,
        close_resources=close_resources,
    )
