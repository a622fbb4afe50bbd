from pydantic import BaseModel, EmailStr, field_validator

MIN_PASSWORD_LENGTH = 8


def _check_password_length(value: str) -> str:
    if len(value) < MIN_PASSWORD_LENGTH:
        raise ValueError(f'Password must be at least {MIN_PASSWORD_LENGTH} characters long')
    return value


def _normalize_email(value: str) -> str:
    return value.strip().lower()


class CreateUserRequest(BaseModel):
    name: str
    email: EmailStr
    password: str

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
        return _normalize_email(value)

    @field_validator('password')
    @classmethod
    def validate_password(cls, value):
        return _check_password_length(value)


class LoginRequest(BaseModel):
    email: EmailStr
    password: str

    @field_validator('email')
    @classmethod
    def normalize_email(cls, value):
        return _normalize_email(value)

    @field_validator('password')
    @classmethod
    def validate_password(cls, value):
        return _check_password_length(value)


class ChangePasswordRequest(BaseModel):
    current_password: str
    new_password: str

    @field_validator('current_password', 'new_password')
    @classmethod
    def validate_password(cls, value):
        return _check_password_length(value)


class AccessTokenResponse(BaseModel):
    status: str = "success"
    access_token: str
