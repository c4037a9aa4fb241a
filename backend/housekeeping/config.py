"""
Application settings
Read from environment variables / .env
"""
from typing import Optional
from pydantic import ConfigDict
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings"""

    APP_NAME: str = "Housekeeping Workflow"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Persistence
    DATABASE_URL: str = "sqlite:///./housekeeping.db"
    PERSIST_STATE: bool = True

    # JWT (tokens are issued by the external auth service)
    SECRET_KEY: str = "housekeeping-secret-key-change-in-production"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_HOURS: int = 24

    # A restored housekeeper session start older than this is discarded
    SESSION_RESTORE_MAX_AGE_HOURS: int = 24

    # Optional YAML/JSON task catalog feed loaded at startup
    TASK_CATALOG_PATH: Optional[str] = None

    # Bootstrap the demo rooms and housekeepers when the store is empty
    SEED_DEMO_DATA: bool = True

    model_config = ConfigDict(env_file=".env", case_sensitive=True, extra="ignore")


settings = Settings()
