import os
import logging
from functools import lru_cache
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)

DEFAULT_CORS_ORIGINS = [
    "http://localhost:5173",
    "https://interview-prep-ai-ruddy.vercel.app",
]


class ConfigurationError(RuntimeError):
    """Raised when the process cannot serve requests with the current environment."""


def _first(*keys: str) -> Optional[str]:
    """Return the value of the first environment variable found in keys."""
    for key in keys:
        val = os.getenv(key)
        if val:
            return val
    return None


def _split_origins(raw: Optional[str]) -> List[str]:
    if not raw:
        return list(DEFAULT_CORS_ORIGINS)
    return [o.strip() for o in raw.split(",") if o.strip()]


class Settings(BaseModel):
    app_name: str = "Interview Prep AI"
    version: str = "1.0.0"
    gemini_api_key: Optional[str] = None
    gemini_model: str = "gemini-2.0-flash-lite"
    database_url: str = "sqlite:///./interview_prep.db"
    cors_origins: List[str] = Field(default_factory=lambda: list(DEFAULT_CORS_ORIGINS))
    log_level: str = "INFO"
    log_file: str = "app.log"
    port: int = 8000
    is_production: bool = False

    @classmethod
    def from_env(cls) -> "Settings":
        """Create Settings from environment variables."""
        return cls(
            app_name=os.getenv("APP_NAME", "Interview Prep AI"),
            gemini_api_key=_first("GEMINI_API_KEY", "GOOGLE_API_KEY"),
            gemini_model=os.getenv("GEMINI_MODEL") or "gemini-2.0-flash-lite",
            database_url=os.getenv("DATABASE_URL") or "sqlite:///./interview_prep.db",
            cors_origins=_split_origins(os.getenv("CORS_ORIGINS")),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            log_file=os.getenv("LOG_FILE", "app.log"),
            port=int(os.getenv("PORT", "8000")),
            is_production=os.getenv("RENDER", "false").lower() == "true",
        )


@lru_cache
def get_settings() -> Settings:
    """Return a cached Settings instance."""
    return Settings.from_env()


def require_provider_credentials(settings: Settings) -> None:
    """Fail startup when no Gemini credential is configured."""
    if not settings.gemini_api_key:
        logger.critical("❌ GEMINI_API_KEY is missing in environment")
        raise ConfigurationError("GEMINI_API_KEY or GOOGLE_API_KEY not found in environment")
    logger.info("✅ GEMINI_API_KEY configured")
