"""Process-wide authenticated session state."""

import logging
from dataclasses import dataclass, field

from ums_client.domain.models import UserRecord

logger = logging.getLogger(__name__)


@dataclass
class SessionStore:
    """Holds the currently authenticated user, if any.

    One instance exists per client process. It starts empty, is set by sign-in,
    replaced by a confirmed profile mutation, and cleared by sign-out.
    """

    _current_user: UserRecord | None = field(default=None, init=False)

    @property
    def current_user(self) -> UserRecord | None:
        """Return the signed-in user, or None."""
        return self._current_user

    def sign_in(self, user: UserRecord) -> None:
        """Start a session for the given user."""
        logger.info("Session started for user %s", user.id)
        self._current_user = user

    def replace_user(self, user: UserRecord) -> None:
        """Swap in the server's authoritative record after a mutation."""
        if self._current_user is None:
            raise RuntimeError("Cannot replace user without an active session")
        self._current_user = user

    def clear(self) -> None:
        """End the session."""
        self._current_user = None
