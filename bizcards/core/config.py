from typing import List, Optional
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    SECRET_KEY: str
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24
    # Reissue the session cookie when the token expires sooner than this
    SESSION_REFRESH_THRESHOLD_MINUTES: int = 60

    COOKIE_NAME: str = "access_token"
    ENVIRONMENT: str = "development"  # "development" or "production"

    @property
    def is_development(self) -> bool:
        return self.ENVIRONMENT == "development"

    @property
    def cookie_secure(self):
        return self.ENVIRONMENT == "production"

    @property
    def cookie_samesite(self):
        return "lax"

    @property
    def cookie_max_age(self):
        return self.ACCESS_TOKEN_EXPIRE_MINUTES * 60

    ADMIN_API_KEY: str

    # Object storage (public buckets, REST upload API)
    STORAGE_URL: str = "http://localhost:54321/storage/v1"
    STORAGE_SERVICE_KEY: Optional[str] = None
    STORAGE_BUCKET: str = "employee-photos"

    DEFAULT_PROFILE_PICTURE_URL: str = (
        "http://localhost:54321/storage/v1/object/public/company-logos/thumb_for_the_home_screen.jpg"
    )
    PHOTO_FETCH_TIMEOUT_SECONDS: float = 5.0

    ALLOWED_EMAIL_DOMAINS: List[str] = ["cfm.com", "cfm.co.mz"]

    PUBLIC_BASE_URL: str = "http://localhost:8000"
    CORS_ORIGINS: List[str] = ["http://localhost:3000"]

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )


settings = Settings()
