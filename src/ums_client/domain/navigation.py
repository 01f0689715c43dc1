"""Navigation affordances derived from session and route."""

from enum import StrEnum


class Affordance(StrEnum):
    """Conditionally rendered header element."""

    HOME_LINK = "home_link"
    ABOUT_LINK = "about_link"
    PROFILE_AVATAR_LINK = "profile_avatar_link"
    SIGN_IN_LINK = "sign_in_link"
    LOGOUT_BUTTON = "logout_button"
