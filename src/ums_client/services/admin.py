"""Admin dashboard actions."""

import logging
from dataclasses import dataclass

from ums_client.adapters.user_api_client import UserApiClient
from ums_client.domain.models import UserRecord
from ums_client.errors import MutationError, NetworkError

logger = logging.getLogger(__name__)


@dataclass
class AdminService:
    """User listing, search and deletion for administrators."""

    api_client: UserApiClient

    async def list_users(self, search: str = "") -> list[UserRecord]:
        """Return users matching the search term; empty when the fetch fails."""
        try:
            users = await self.api_client.list_users()
        except (MutationError, NetworkError):
            logger.warning("Failed to fetch users", exc_info=True)
            return []
        return filter_users(users, search)

    async def delete_user(self, user_id: str) -> bool:
        """Delete a user and report whether it worked."""
        try:
            await self.api_client.delete_user(user_id)
        except (MutationError, NetworkError):
            logger.warning("Failed to delete user %s", user_id, exc_info=True)
            return False
        return True


def filter_users(users: list[UserRecord], search: str) -> list[UserRecord]:
    """Case-insensitive substring match on username or email."""
    term = search.lower()
    if not term:
        return list(users)
    return [
        user
        for user in users
        if term in user.username.lower() or term in user.email.lower()
    ]
