"""Domain models for user records."""

from dataclasses import dataclass

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


@dataclass(frozen=True)
class UserRecord:
    """Represents a user as returned by the user-record service."""

    id: str
    username: str
    email: str
    profile_picture_url: str | None = None


class UserPayload(BaseModel):
    """User JSON from the backend, tolerant of legacy field names."""

    model_config = ConfigDict(extra="ignore")

    id: str = Field(validation_alias=AliasChoices("id", "_id"))
    username: str
    email: str
    profile_picture_url: str | None = Field(
        default=None,
        validation_alias=AliasChoices(
            "profilePictureUrl", "profilePicture", "profile_picture_url"
        ),
    )

    def to_record(self) -> UserRecord:
        """Convert the validated payload into a domain record."""
        return UserRecord(
            id=self.id,
            username=self.username,
            email=self.email,
            profile_picture_url=self.profile_picture_url,
        )
