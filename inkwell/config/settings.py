"""Application settings and configuration"""

from pydantic_settings import BaseSettings
from typing import Optional


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # Application
    APP_NAME: str = "Inkwell"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Database
    DATABASE_URL: str = "sqlite:///./inkwell.db"
    DATABASE_ECHO: bool = False

    # Uploaded attachments (profile pictures, article images)
    MEDIA_ROOT: str = "./media"
    MAX_UPLOAD_BYTES: int = 5 * 1024 * 1024
    ALLOWED_IMAGE_TYPES: str = "image/png,image/jpeg,image/gif,image/webp"

    # Credentials (any method string accepted by werkzeug.security)
    PASSWORD_HASH_METHOD: str = "scrypt"

    # Math rendering ("block" or "inline" MathML)
    MATH_DISPLAY: str = "block"

    # Optional admin bootstrap, applied on startup when both are set
    ADMIN_HANDLE: Optional[str] = None
    ADMIN_PASSWORD: Optional[str] = None

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"  # Ignore extra fields in .env


settings = Settings()
