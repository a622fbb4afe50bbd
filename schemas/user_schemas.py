from datetime import datetime
from pydantic import BaseModel, ConfigDict, EmailStr, field_validator


class UserResponse(BaseModel):
    """Outward projection of a user. The password digest is never part of it."""
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    email: str
    created_at: datetime | None = None
    updated_at: datetime | None = None


class EditProfileRequest(BaseModel):
    name: str
    email: EmailStr

    @field_validator('name')
    @classmethod
    def validate_name(cls, value):
        value = value.strip()
        if not value:
            raise ValueError('Name is required')
        return value

    @field_validator('email')
    @classmethod
    def normalize_email(cls, value):
        return value.strip().lower()


class UserEnvelope(BaseModel):
    status: str = "success"
    message: str
    data: UserResponse


class LoginResponse(UserEnvelope):
    access_token: str


class SessionResponse(BaseModel):
    status: str = "success"
    message: str
    user_id: str
