"""
Configuration settings for StockDesk
"""
import os
from pathlib import Path
from typing import List
import dotenv
from pydantic_settings import BaseSettings

# Resolve .env paths relative to this file so settings work regardless of cwd.
_CONFIG_DIR = Path(__file__).resolve().parent.parent  # backend/
_STOCKDESK_ROOT = _CONFIG_DIR.parent                   # stockdesk/
_ENV_CANDIDATES = [
    _CONFIG_DIR / ".env",       # backend/.env
    _STOCKDESK_ROOT / ".env",   # stockdesk/.env
]
_ENV_FILE = [str(p) for p in _ENV_CANDIDATES if p.is_file()]

# Load .env into os.environ so the os.getenv defaults below see it too.
for _p in _ENV_CANDIDATES:
    if _p.is_file():
        dotenv.load_dotenv(_p, override=False)
        break


def with_psycopg_driver(url: str) -> str:
    if url.startswith("postgresql://"):
        return url.replace("postgresql://", "postgresql+psycopg://", 1)
    return url


class Settings(BaseSettings):
    """Application settings"""

    # App
    APP_NAME: str = "StockDesk"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = os.getenv("DEBUG", "False").lower() == "true"
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # Database (PostgreSQL in production, SQLite for local development)
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./stockdesk.db")

    @property
    def database_connection_string(self) -> str:
        """Database URL with the psycopg driver selected for bare postgresql:// URLs"""
        return with_psycopg_driver(self.DATABASE_URL)

    @property
    def is_sqlite(self) -> bool:
        return self.database_connection_string.startswith("sqlite")

    # CORS - parse from comma-separated string or use default
    CORS_ORIGINS: str = "http://localhost:3000,http://localhost:5173,http://localhost:8000"

    _DEV_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
        "http://localhost:5173",
        "http://127.0.0.1:5173",
        "http://localhost:8000",
        "http://127.0.0.1:8000",
    ]

    @property
    def cors_origins_list(self) -> List[str]:
        """Get CORS origins as a list. Always includes common dev origins."""
        if not self.CORS_ORIGINS:
            return list(dict.fromkeys(self._DEV_ORIGINS))
        origins = [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]
        # "*" cannot be combined with allow_credentials=True
        if "*" in origins:
            return list(dict.fromkeys(self._DEV_ORIGINS))
        return list(dict.fromkeys(origins + self._DEV_ORIGINS))

    # Bulk import
    DEFAULT_IMPORT_CURRENCY: str = os.getenv("DEFAULT_IMPORT_CURRENCY", "USD")
    DEFAULT_SELLING_CURRENCY: str = os.getenv("DEFAULT_SELLING_CURRENCY", "GHS")
    MAX_IMPORT_FILE_SIZE_MB: int = int(os.getenv("MAX_IMPORT_FILE_SIZE_MB", "10"))
    MAX_IMAGE_ZIP_SIZE_MB: int = int(os.getenv("MAX_IMAGE_ZIP_SIZE_MB", "50"))
    MAX_IMAGE_FILE_SIZE_MB: int = int(os.getenv("MAX_IMAGE_FILE_SIZE_MB", "10"))

    # Uploaded files (product images) are served from here under /uploads
    UPLOADS_DIR: str = os.getenv("UPLOADS_DIR", str(_CONFIG_DIR / "uploads"))

    class Config:
        env_file = _ENV_FILE if _ENV_FILE else [".env", "../.env"]
        case_sensitive = True
        extra = "ignore"


settings = Settings()
