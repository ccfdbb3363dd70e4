import os
from functools import lru_cache
from typing import List, Optional

from dotenv import load_dotenv
from pydantic_settings import BaseSettings

load_dotenv()


def _env_flag(name: str, default: str = "0") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "y")


class Settings(BaseSettings):
    """Runtime settings for the Kurd Med backend."""

    # Azure OpenAI
    AZURE_OPENAI_API_KEY: str = os.getenv("AZURE_OPENAI_API_KEY", "")
    AZURE_OPENAI_ENDPOINT: str = os.getenv("AZURE_OPENAI_ENDPOINT", "")
    AZURE_OPENAI_API_VERSION: str = os.getenv("AZURE_OPENAI_API_VERSION", "2024-12-01-preview")
    AZURE_CHAT_DEPLOYMENT: str = os.getenv("AZURE_CHAT_DEPLOYMENT", "gpt-4o")
    OPENAI_TIMEOUT: Optional[float] = None

    # Firebase identity toolkit
    FIREBASE_API_KEY: str = os.getenv("FIREBASE_API_KEY", "")
    FIREBASE_REQUEST_URI: str = os.getenv("FIREBASE_REQUEST_URI", "http://localhost:5173")
    REQUIRE_AUTH: bool = _env_flag("REQUIRE_AUTH")

    # Client state
    PREFERENCES_PATH: str = os.getenv("PREFERENCES_PATH", "data/preferences.json")
    DEFAULT_LANGUAGE: str = os.getenv("DEFAULT_LANGUAGE", "en")

    # In-memory session caps; oldest entries are dropped first
    MAX_CHAT_SESSIONS: int = int(os.getenv("MAX_CHAT_SESSIONS", "500"))
    MAX_AUTH_SESSIONS: int = int(os.getenv("MAX_AUTH_SESSIONS", "1000"))

    CORS_ORIGINS: List[str] = [
        "http://127.0.0.1:5173",
        "http://localhost:5173",
    ]
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    class Config:
        case_sensitive = True


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
