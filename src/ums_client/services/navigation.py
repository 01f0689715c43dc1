"""Header affordance rules."""

from ums_client.domain.models import UserRecord
from ums_client.domain.navigation import Affordance

ADMIN_DASHBOARD_PATH = "/admin-dashboard"
HIDDEN_NAV_PATHS = frozenset(
    {
        "/admin-login",
        "/",
        "/login",
        "/sign-up",
        ADMIN_DASHBOARD_PATH,
        "/admin/add-user",
    }
)
HIDDEN_NAV_PREFIX = "/admin/edit-user"


def visible_affordances(
    current_user: UserRecord | None, path: str
) -> frozenset[Affordance]:
    """Return the header elements shown for a session state and route."""
    shown: set[Affordance] = set()
    if not _hides_nav_links(path):
        shown.update({Affordance.HOME_LINK, Affordance.ABOUT_LINK})
        if current_user is not None:
            shown.add(Affordance.PROFILE_AVATAR_LINK)
        else:
            shown.add(Affordance.SIGN_IN_LINK)
    # Keyed on the route only, so it also shows without a session.
    if path == ADMIN_DASHBOARD_PATH:
        shown.add(Affordance.LOGOUT_BUTTON)
    return frozenset(shown)


def profile_link_target(current_user: UserRecord | None) -> str:
    """Return where the profile/sign-in link points."""
    return "/profile" if current_user is not None else "/login"


def _hides_nav_links(path: str) -> bool:
    return path in HIDDEN_NAV_PATHS or path.startswith(HIDDEN_NAV_PREFIX)
