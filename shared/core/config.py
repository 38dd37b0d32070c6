import os
from typing import List, Optional
from pydantic_settings import BaseSettings
from dotenv import load_dotenv

# Always load .env from root
BASE_DIR = os.path.dirname(os.path.dirname(os.path.dirname(__file__)))
load_dotenv(os.path.join(BASE_DIR, ".env"))


class Settings(BaseSettings):
    JWT_SECRET: str = os.getenv("JWT_SECRET", "change-me-in-env")
    JWT_ALGORITHM: str = os.getenv("JWT_ALGORITHM", "HS256")
    JWT_EXPIRE_MINUTES: int = int(
        os.getenv("JWT_EXPIRE_MINUTES", 1440))  # 24 hours default

    DB_USER: Optional[str] = os.getenv("DB_USER")
    DB_PASS: Optional[str] = os.getenv("DB_PASS")
    DB_HOST: Optional[str] = os.getenv("DB_HOST", "localhost")
    DB_PORT: Optional[str] = os.getenv("DB_PORT", "5432")
    AUTH_DB_NAME: Optional[str] = os.getenv("AUTH_DB_NAME", "parking_auth")
    PARKING_DB_NAME: Optional[str] = os.getenv(
        "PARKING_DB_NAME", "parking")

    # Full URL overrides (sqlite for local runs and tests)
    AUTH_DATABASE_URL: Optional[str] = os.getenv("AUTH_DATABASE_URL")
    PARKING_DATABASE_URL: Optional[str] = os.getenv("PARKING_DATABASE_URL")

    # Document storage
    UPLOAD_DIR: str = os.getenv("UPLOAD_DIR", os.path.join(BASE_DIR, "uploads"))
    DOCUMENTS_BUCKET: str = os.getenv("DOCUMENTS_BUCKET", "parking-documents")
    PUBLIC_BASE_URL: str = os.getenv(
        "PUBLIC_BASE_URL", "http://127.0.0.1:8002")
    SIGNED_URL_EXPIRE_SECONDS: int = int(
        os.getenv("SIGNED_URL_EXPIRE_SECONDS", 3600))
    MAX_DOCUMENT_SIZE: int = int(
        os.getenv("MAX_DOCUMENT_SIZE", 2 * 1024 * 1024))  # 2MB

    # Reservation policy
    DOCUMENT_REQUIRED_AFTER_DAYS: int = int(
        os.getenv("DOCUMENT_REQUIRED_AFTER_DAYS", 2))
    MAX_RESERVATION_DAYS: Optional[int] = (
        int(os.getenv("MAX_RESERVATION_DAYS"))
        if os.getenv("MAX_RESERVATION_DAYS") else None
    )

    # Email
    SMTP_HOST: Optional[str] = os.getenv("SMTP_HOST")
    SMTP_PORT: int = int(os.getenv("SMTP_PORT", 587))
    SMTP_USERNAME: Optional[str] = os.getenv("SMTP_USERNAME")
    SMTP_PASSWORD: Optional[str] = os.getenv("SMTP_PASSWORD")
    SMTP_USE_SSL: bool = os.getenv("SMTP_USE_SSL", "False").lower() == "true"
    EMAIL_SENDER: str = os.getenv("EMAIL_SENDER", "noreply@parking.local")

    # Bootstrap admin (shared/data/admin_insert.py)
    ADMIN_EMAIL: Optional[str] = os.getenv("ADMIN_EMAIL")
    ADMIN_PASSWORD: Optional[str] = os.getenv("ADMIN_PASSWORD")

    CORS_ORIGINS: List[str] = [
        "http://localhost:5173",
        "http://localhost:8080",
        "https://reserve-parking-space.vercel.app",
    ]
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


settings = Settings()

AUTH_DATABASE_URL = settings.AUTH_DATABASE_URL or (
    f"postgresql+psycopg2://{settings.DB_USER}:{settings.DB_PASS}@{settings.DB_HOST}:{settings.DB_PORT}/{settings.AUTH_DB_NAME}"
)

PARKING_DATABASE_URL = settings.PARKING_DATABASE_URL or (
    f"postgresql+psycopg2://{settings.DB_USER}:{settings.DB_PASS}@{settings.DB_HOST}:{settings.DB_PORT}/{settings.PARKING_DB_NAME}"
)
