from pydantic_settings import BaseSettings
from pydantic import ConfigDict, field_validator, model_validator


class Settings(BaseSettings):
    model_config = ConfigDict(env_file=".env", extra="ignore")

    ENV: str = "development"

    DATABASE_URL: str = "sqlite:///./app.db"
    JWT_SECRET: str
    REFRESH_JWT_SECRET: str
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_DAYS: int = 7
    REFRESH_TOKEN_EXPIRE_DAYS: int = 30
    LOG_LEVEL: str = "INFO"
    LOG_DIR: str = "logs"
    CORS_ORIGINS: list[str] = ["http://localhost:3000"]
    RATE_LIMIT: str = "100/15 minutes"

    @field_validator("JWT_SECRET", "REFRESH_JWT_SECRET")
    @classmethod
    def validate_secret(cls, value: str):
        if not value or not value.strip():
            raise ValueError("Signing secret must not be empty")
        return value

    @model_validator(mode="after")
    def validate_distinct_secrets(self):
        # Access and refresh tokens must never be interchangeable
        if self.JWT_SECRET == self.REFRESH_JWT_SECRET:
            raise ValueError("JWT_SECRET and REFRESH_JWT_SECRET must differ")
        return self

    @property
    def cookie_secure(self) -> bool:
        return self.ENV == "production"


settings = Settings()
