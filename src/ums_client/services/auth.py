"""Sign-in and sign-out actions."""

import logging
from dataclasses import dataclass

from ums_client.adapters.user_api_client import UserApiClient
from ums_client.errors import MutationError, NetworkError
from ums_client.services.session import SessionStore

logger = logging.getLogger(__name__)


@dataclass
class AuthService:
    """Keeps the session store in step with the backend session."""

    api_client: UserApiClient
    session: SessionStore

    async def sign_in(self, email: str, password: str) -> str | None:
        """Sign in and return an error message, or None on success."""
        try:
            user = await self.api_client.sign_in(email, password)
        except MutationError as exc:
            return exc.message
        except NetworkError:
            logger.warning("Sign-in request did not reach the server")
            return "Error signing in"
        self.session.sign_in(user)
        return None

    async def sign_out(self) -> bool:
        """Sign out; the session is cleared once the backend answers."""
        try:
            await self.api_client.sign_out()
        except NetworkError:
            logger.warning("Sign-out request failed; keeping local session")
            return False
        self.session.clear()
        return True
