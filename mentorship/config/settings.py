# mentorship/config/settings.py
# Runtime configuration for the mentorship backend

import os
from pathlib import Path
from typing import List

from dotenv import load_dotenv

load_dotenv()

_DEFAULT_CURRICULUM = Path(__file__).resolve().parent.parent / "data" / "curriculum.json"


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() == "true"


class Settings:
    """Application settings read from the environment"""

    # Database
    DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./mentorship.db")

    # Blob storage for submitted files
    UPLOAD_DIR = os.getenv("UPLOAD_DIR", "uploads")
    MAX_FILE_SIZE = int(os.getenv("MAX_FILE_SIZE", 10 * 1024 * 1024))  # 10MB

    # Curriculum
    CURRICULUM_PATH = os.getenv("CURRICULUM_PATH", str(_DEFAULT_CURRICULUM))
    CURRICULUM_TITLE = os.getenv("CURRICULUM_TITLE", "Strivers A2Z DSA Course")

    # Maintenance job
    SUBMISSION_RETENTION_DAYS = int(os.getenv("SUBMISSION_RETENTION_DAYS", 2))
    PENDING_TIMEOUT_DAYS = int(os.getenv("PENDING_TIMEOUT_DAYS", 5))
    ORPHAN_BLOB_GRACE_HOURS = int(os.getenv("ORPHAN_BLOB_GRACE_HOURS", 24))
    MAINTENANCE_HOUR = int(os.getenv("MAINTENANCE_HOUR", 0))
    MAINTENANCE_MINUTE = int(os.getenv("MAINTENANCE_MINUTE", 0))
    SCHEDULER_TIMEZONE = os.getenv("SCHEDULER_TIMEZONE", "Asia/Kolkata")
    SCHEDULER_ENABLED = _env_bool("SCHEDULER_ENABLED", "true")
    CRON_SECRET = os.getenv("CRON_SECRET")

    # Auth
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-change-me")
    ALGORITHM = os.getenv("ALGORITHM", "HS256")
    ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", 24 * 60))

    # HTTP
    CORS_ORIGINS = os.getenv(
        "CORS_ORIGINS",
        "http://localhost:5173,http://localhost:3000,http://127.0.0.1:5173",
    )

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    @classmethod
    def cors_origins(cls) -> List[str]:
        """Split the comma separated origin list"""
        return [origin.strip() for origin in cls.CORS_ORIGINS.split(",") if origin.strip()]


settings = Settings()
