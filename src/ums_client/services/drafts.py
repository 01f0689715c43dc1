"""In-progress profile edits."""

from dataclasses import dataclass, field

from ums_client.domain.models import UserRecord

EDITABLE_FIELDS = frozenset({"username", "email", "password", "profile_picture_url"})


@dataclass(frozen=True)
class EffectiveProfile:
    """Profile values as the editor should display them."""

    username: str | None
    email: str | None
    profile_picture_url: str | None


@dataclass
class ProfileDraft:
    """Single mutable aggregate shared by field edits and upload completion."""

    _fields: dict[str, str] = field(default_factory=dict, init=False)

    def set_field(self, name: str, value: str) -> None:
        """Overwrite one draft field, leaving the others untouched."""
        if name not in EDITABLE_FIELDS:
            raise ValueError(f"Unknown profile field: {name}")
        self._fields[name] = value

    def merge_picture_url(self, url: str) -> None:
        """Record the URL of a freshly uploaded avatar."""
        self.set_field("profile_picture_url", url)

    def read_effective(self, user: UserRecord | None) -> EffectiveProfile:
        """Return draft values where present, falling back to the session user."""
        return EffectiveProfile(
            username=self._pick("username", user.username if user else None),
            email=self._pick("email", user.email if user else None),
            profile_picture_url=self._pick(
                "profile_picture_url", user.profile_picture_url if user else None
            ),
        )

    def snapshot(self) -> dict[str, str]:
        """Return a copy of the uncommitted fields."""
        return dict(self._fields)

    def reset(self) -> None:
        """Discard every uncommitted field."""
        self._fields.clear()

    def is_empty(self) -> bool:
        return not self._fields

    def _pick(self, name: str, fallback: str | None) -> str | None:
        if name in self._fields:
            return self._fields[name]
        return fallback
