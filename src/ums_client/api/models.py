"""Request and response models for the HTTP shell."""

from pydantic import BaseModel

from ums_client.domain.models import UserRecord


class SignInRequest(BaseModel):
    email: str
    password: str


class ProfileFieldsRequest(BaseModel):
    """Field edits; omitted fields are left as they are in the draft."""

    username: str | None = None
    email: str | None = None
    password: str | None = None


class UserResponse(BaseModel):
    id: str
    username: str
    email: str
    profile_picture_url: str | None = None

    @classmethod
    def from_record(cls, user: UserRecord) -> "UserResponse":
        return cls(
            id=user.id,
            username=user.username,
            email=user.email,
            profile_picture_url=user.profile_picture_url,
        )
