"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.responses import JSONResponse

from ums_client.api.models import ProfileFieldsRequest, SignInRequest, UserResponse
from ums_client.app_logging import configure_logging
from ums_client.containers import AppContainer
from ums_client.services.navigation import profile_link_target, visible_affordances
from ums_client.services.profile import ProfileEditor
from ums_client.services.uploads import UploadTracker


def create_app(container: AppContainer) -> FastAPI:  # noqa: PLR0915
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.get("/nav")
    async def nav(request: Request, path: str = "/") -> dict[str, object]:
        """Return the header affordances for a route."""
        state_container: AppContainer = request.app.state.container
        user = state_container.session.current_user
        return {
            "affordances": sorted(visible_affordances(user, path)),
            "profile_link": profile_link_target(user),
            "avatar_url": user.profile_picture_url if user else None,
        }

    @app.post("/auth/signin")
    async def sign_in(body: SignInRequest, request: Request) -> UserResponse:
        """Sign in, start the local session and drop the previous user's edits."""
        state_container: AppContainer = request.app.state.container
        error = await state_container.auth_service.sign_in(body.email, body.password)
        user = state_container.session.current_user
        if error is not None or user is None:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail=error or "Sign in failed",
            )
        await state_container.profile_editor.close()
        return UserResponse.from_record(user)

    @app.post("/auth/signout")
    async def sign_out(request: Request) -> dict[str, bool]:
        """Sign out and discard any unsaved profile edits."""
        state_container: AppContainer = request.app.state.container
        signed_out = await state_container.auth_service.sign_out()
        if signed_out:
            await state_container.profile_editor.close()
        return {"signed_out": signed_out}

    @app.get("/profile")
    async def profile(request: Request) -> dict[str, object]:
        """Return the form values, upload status and submit state."""
        editor = _signed_in_editor(request)
        effective = editor.effective()
        return {
            "username": effective.username,
            "email": effective.email,
            "profile_picture_url": effective.profile_picture_url,
            "upload": _upload_status(editor.uploads),
            "submitting": editor.submitter.pending,
        }

    @app.patch("/profile")
    async def edit_profile(
        body: ProfileFieldsRequest, request: Request
    ) -> dict[str, str]:
        """Write the provided fields into the draft."""
        editor = _signed_in_editor(request)
        for name, value in body.model_dump(exclude_none=True).items():
            editor.set_field(name, value)
        return {"status": "ok"}

    @app.post("/profile/picture", status_code=status.HTTP_202_ACCEPTED)
    async def upload_picture(request: Request, filename: str) -> dict[str, object]:
        """Start uploading the raw request body as the new avatar."""
        editor = _signed_in_editor(request)
        data = await request.body()
        task = editor.select_file(data, filename)
        logger.info("Started avatar upload %s (%d bytes)", task.stored_name, len(data))
        return _upload_status(editor.uploads)

    @app.get("/profile/picture")
    async def picture_status(request: Request) -> dict[str, object]:
        """Return the avatar upload status."""
        editor = _signed_in_editor(request)
        return _upload_status(editor.uploads)

    @app.post("/profile/submit")
    async def submit_profile(request: Request) -> JSONResponse:
        """Submit the draft; failures come back as 400 with the message."""
        editor = _signed_in_editor(request)
        outcome = await editor.submit()
        if not outcome.ok:
            return JSONResponse(
                status_code=status.HTTP_400_BAD_REQUEST,
                content={"message": outcome.message},
            )
        user = UserResponse.from_record(outcome.user) if outcome.user else None
        return JSONResponse(
            content={
                "message": outcome.message,
                "user": user.model_dump() if user else None,
            }
        )

    @app.delete("/profile/draft")
    async def discard_draft(request: Request) -> dict[str, str]:
        """Drop unsaved edits."""
        editor = _signed_in_editor(request)
        editor.draft.reset()
        return {"status": "ok"}

    @app.get("/admin/users")
    async def admin_users(request: Request, search: str = "") -> dict[str, object]:
        """Return users filtered by username or email."""
        state_container: AppContainer = request.app.state.container
        users = await state_container.admin_service.list_users(search)
        return {
            "users": [UserResponse.from_record(user).model_dump() for user in users]
        }

    @app.delete("/admin/users/{user_id}")
    async def admin_delete_user(user_id: str, request: Request) -> dict[str, str]:
        """Delete a user record."""
        state_container: AppContainer = request.app.state.container
        if not await state_container.admin_service.delete_user(user_id):
            raise HTTPException(
                status_code=status.HTTP_502_BAD_GATEWAY,
                detail="Failed to delete user.",
            )
        return {"status": "deleted"}

    return app


def _signed_in_editor(request: Request) -> ProfileEditor:
    container: AppContainer = request.app.state.container
    if container.session.current_user is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)
    return container.profile_editor


def _upload_status(tracker: UploadTracker) -> dict[str, object]:
    task = tracker.task
    return {
        "status": tracker.status.value,
        "percent": tracker.percent,
        "message": tracker.message,
        "result_url": task.result_url if task else None,
    }
