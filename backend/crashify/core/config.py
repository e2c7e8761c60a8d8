from pydantic_settings import BaseSettings
from typing import Optional
import secrets


class Settings(BaseSettings):
    # Database
    DATABASE_URL: str
    SUPABASE_DB_URL: Optional[str] = None

    # Security
    SECRET_KEY: str = ""
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 480  # 8 hours, same as an admin session
    CSRF_SECRET: str = ""
    CSRF_TOKEN_MAX_AGE: int = 2 * 60 * 60

    # File storage
    STORAGE_DIR: str = "./storage/assessment-photos"
    PUBLIC_FILES_URL: str = "/files"
    MAX_UPLOAD_FILES: int = 30
    MAX_FILE_SIZE_MB: int = 10

    # Email (Resend)
    RESEND_API_KEY: Optional[str] = None
    RESEND_EMAIL_FROM: str = "info@crashify.com.au"
    CONTACT_INBOX: str = "info@crashify.com.au"

    # App
    ENVIRONMENT: str = "development"
    API_PREFIX: str = "/api"
    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: str = "*"

    class Config:
        env_file = ".env"
        case_sensitive = True

    @property
    def max_file_size_bytes(self) -> int:
        return self.MAX_FILE_SIZE_MB * 1024 * 1024


# Create settings instance
_settings = Settings()

# Generate secrets if not provided (development only)
if not _settings.SECRET_KEY:
    if _settings.ENVIRONMENT in ("development", "test"):
        _settings.SECRET_KEY = secrets.token_urlsafe(32)
        print("⚠️  WARNING: Using auto-generated SECRET_KEY. Set SECRET_KEY in .env for production!")
    else:
        raise ValueError("SECRET_KEY is required in production. Set it in .env file.")

if not _settings.CSRF_SECRET:
    _settings.CSRF_SECRET = _settings.SECRET_KEY

settings = _settings
