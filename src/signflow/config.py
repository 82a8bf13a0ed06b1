"""Configuration module for the SignFlow integrity service.

Every setting has a default suitable for local development and can be
overridden through an environment variable of the same name.
"""

import os

__all__ = ["Config"]


class Config:
    """Application settings and constants."""

    # Storage
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./signflow.db")
    STORAGE_ROOT: str = os.getenv("STORAGE_ROOT", "uploads")
    PUBLIC_BASE_URL: str = os.getenv("PUBLIC_BASE_URL", "http://localhost:8000").rstrip("/")

    # Authentication (tokens are verified, never issued to end users here)
    SECRET_KEY: str = os.getenv("SECRET_KEY", "your-secret-key-here")
    ALGORITHM: str = os.getenv("ALGORITHM", "HS256")
    ACCESS_TOKEN_EXPIRE_MINUTES: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "30"))
    CRON_SECRET: str = os.getenv("CRON_SECRET", "")

    # Uploads
    MAX_FILE_SIZE: int = int(os.getenv("MAX_FILE_SIZE", str(10 * 1024 * 1024)))  # 10 MB

    # Batch signing
    BATCH_MAX_DOCUMENTS: int = int(os.getenv("BATCH_MAX_DOCUMENTS", "20"))
    BATCH_MAX_CONCURRENT: int = int(os.getenv("BATCH_MAX_CONCURRENT", "5"))

    # QR rendering
    QR_SIZE: int = int(os.getenv("QR_SIZE", "300"))
    QR_BORDER: int = int(os.getenv("QR_BORDER", "2"))
    QR_MAX_PAYLOAD_BYTES: int = int(os.getenv("QR_MAX_PAYLOAD_BYTES", "1024"))

    # Retention
    CLEANUP_INTERVAL_HOURS: int = int(os.getenv("CLEANUP_INTERVAL_HOURS", "24"))

    # Public validation routes: attempts per client and window
    VALIDATION_RATE_LIMIT: int = int(os.getenv("VALIDATION_RATE_LIMIT", "30"))
    VALIDATION_RATE_WINDOW_SECONDS: int = int(os.getenv("VALIDATION_RATE_WINDOW_SECONDS", "300"))

    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
