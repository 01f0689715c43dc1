"""Profile editing: draft submission and the editor facade."""

import logging
from dataclasses import dataclass, field

from ums_client.adapters.user_api_client import UserApiClient
from ums_client.domain.models import UserRecord
from ums_client.domain.uploads import UploadTask
from ums_client.errors import MutationError, NetworkError
from ums_client.services.drafts import EffectiveProfile, ProfileDraft
from ums_client.services.session import SessionStore
from ums_client.services.uploads import AssetStore, UploadTracker

logger = logging.getLogger(__name__)

UPDATE_SUCCEEDED_MESSAGE = "Profile updated successfully"
UPDATE_FAILED_MESSAGE = "Error updating profile"
UPDATE_PENDING_MESSAGE = "Update already in progress"
NOT_SIGNED_IN_MESSAGE = "Not signed in"


@dataclass(frozen=True)
class SubmitOutcome:
    """Result of a profile submission, rendered as a notification."""

    ok: bool
    message: str
    user: UserRecord | None = None


@dataclass
class ProfileSubmitter:
    """Sends draft snapshots to the user-record service.

    The session is only written after the server confirms the change, and then
    it receives the server's record as-is.
    """

    api_client: UserApiClient
    session: SessionStore
    draft: ProfileDraft
    _pending: bool = field(default=False, init=False)

    @property
    def pending(self) -> bool:
        return self._pending

    async def submit(self, user_id: str, draft_snapshot: dict[str, str]) -> SubmitOutcome:
        """Submit one update for the given user; rejected while another is pending."""
        if self._pending:
            return SubmitOutcome(ok=False, message=UPDATE_PENDING_MESSAGE)
        self._pending = True
        try:
            updated = await self.api_client.update_user(user_id, draft_snapshot)
        except MutationError as exc:
            logger.info("Profile update rejected (%s): %s", exc.status_code, exc.message)
            return SubmitOutcome(ok=False, message=exc.message)
        except NetworkError:
            logger.warning("Profile update for %s did not reach the server", user_id)
            return SubmitOutcome(ok=False, message=UPDATE_FAILED_MESSAGE)
        finally:
            self._pending = False

        current = self.session.current_user
        if current is None or current.id != user_id:
            logger.warning("Session changed while updating %s; result dropped", user_id)
            return SubmitOutcome(ok=False, message=NOT_SIGNED_IN_MESSAGE)
        self.session.replace_user(updated)
        self.draft.reset()
        return SubmitOutcome(ok=True, message=UPDATE_SUCCEEDED_MESSAGE, user=updated)


@dataclass
class ProfileEditor:
    """One profile editor instance: draft, avatar upload and submission."""

    session: SessionStore
    draft: ProfileDraft
    uploads: UploadTracker
    submitter: ProfileSubmitter

    @classmethod
    def create(
        cls,
        session: SessionStore,
        api_client: UserApiClient,
        asset_store: AssetStore,
    ) -> "ProfileEditor":
        """Build an editor whose tracker and submitter share one draft."""
        draft = ProfileDraft()
        return cls(
            session=session,
            draft=draft,
            uploads=UploadTracker(asset_store=asset_store, draft=draft),
            submitter=ProfileSubmitter(
                api_client=api_client, session=session, draft=draft
            ),
        )

    def set_field(self, name: str, value: str) -> None:
        self.draft.set_field(name, value)

    def select_file(self, data: bytes, filename: str) -> UploadTask:
        return self.uploads.select_file(data, filename)

    def effective(self) -> EffectiveProfile:
        """Return what the form should currently show."""
        return self.draft.read_effective(self.session.current_user)

    async def submit(self) -> SubmitOutcome:
        """Submit the draft for the signed-in user.

        An upload still in flight does not block submission; the picture field
        then carries whatever the draft held at this moment.
        """
        user = self.session.current_user
        if user is None:
            return SubmitOutcome(ok=False, message=NOT_SIGNED_IN_MESSAGE)
        return await self.submitter.submit(user.id, self.draft.snapshot())

    async def close(self) -> None:
        """Discard the draft and stop tracking uploads."""
        self.draft.reset()
        await self.uploads.close()
