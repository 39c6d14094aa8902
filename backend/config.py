# backend/config.py
from pydantic_settings import BaseSettings
from typing import ClassVar
from pathlib import Path

# Resolve absolute path to the .env file for reliable loading
env_path = Path(__file__).parent.parent / ".env"

class Settings(BaseSettings):
    SECRET_KEY: str = "dev-secret-change-me"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60
    DATABASE_URL: str = "sqlite:///./harvesthub.db"
    FRONTEND_URL: str = "http://localhost:5173"

    # Tracking codes: prefix + random base-36 suffix
    TRACKING_PREFIX: str = "HH-"
    TRACKING_CODE_LENGTH: int = 7
    TRACKING_CODE_MAX_ATTEMPTS: int = 5

    # Header carrying the buyer's cart session key
    CART_SESSION_HEADER: str = "X-Cart-Session"

    LOG_LEVEL: str = "INFO"

    class Config:
        env_file: ClassVar[str] = str(env_path)
        extra: ClassVar[str] = "ignore"

settings = Settings()
