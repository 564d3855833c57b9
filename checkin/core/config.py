# File: checkin/core/config.py
from pydantic_settings import BaseSettings, SettingsConfigDict
from dotenv import load_dotenv
from typing import Optional
import os

load_dotenv()


class Settings(BaseSettings):
    # ---------------------------
    # Meta / Pydantic settings
    # ---------------------------
    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",  # Ignore unexpected env vars instead of erroring
    )

    # ---------------------------
    # API / Project
    # ---------------------------
    API_V1_STR: str = os.getenv("API_V1_STR", "/api/v1")
    PROJECT_NAME: str = os.getenv("PROJECT_NAME", "Event Check-in")

    # ---------------------------
    # Environment / Logging
    # ---------------------------
    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")  # development | staging | production
    DEBUG: bool = os.getenv("DEBUG", "false").lower() == "true"
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # ---------------------------
    # Session / Auth
    # ---------------------------
    SECRET_KEY: str = os.getenv("SECRET_KEY", "change-me-in-production")
    ALGORITHM: str = os.getenv("ALGORITHM", "HS256")
    SESSION_EXPIRE_MINUTES: int = int(os.getenv("SESSION_EXPIRE_MINUTES", "720"))
    SESSION_COOKIE_NAME: str = os.getenv("SESSION_COOKIE_NAME", "authenticated")
    ROLE_COOKIE_NAME: str = os.getenv("ROLE_COOKIE_NAME", "userRole")

    # Shared-secret passwords. An empty value disables that password.
    ADMIN_PASSWORD: str = os.getenv("ADMIN_PASSWORD", "admin2025")
    SYSTEM_PASSWORD: str = os.getenv("SYSTEM_PASSWORD", "")
    LIMITED_PASSWORD: str = os.getenv("LIMITED_PASSWORD", "ticket2025")

    # ---------------------------
    # Google Sheets store
    # ---------------------------
    GOOGLE_SHEET_ID: str = os.getenv("GOOGLE_SHEET_ID", "")
    GOOGLE_SHEETS_CLIENT_EMAIL: Optional[str] = os.getenv("GOOGLE_SHEETS_CLIENT_EMAIL")
    GOOGLE_SHEETS_PRIVATE_KEY: Optional[str] = os.getenv("GOOGLE_SHEETS_PRIVATE_KEY")
    GOOGLE_SERVICE_ACCOUNT_FILE: Optional[str] = os.getenv("GOOGLE_SERVICE_ACCOUNT_FILE")
    BADGE_SHEET_TITLE: str = os.getenv("BADGE_SHEET_TITLE", "Badges")

    # Keep all rows in process memory instead of a spreadsheet (local development)
    USE_IN_MEMORY_STORE: bool = os.getenv("USE_IN_MEMORY_STORE", "false").lower() == "true"

    # ---------------------------
    # Identifiers / limits
    # ---------------------------
    ID_GENERATION_ATTEMPTS: int = int(os.getenv("ID_GENERATION_ATTEMPTS", "10"))
    MAX_TICKETS_PER_REQUEST: int = int(os.getenv("MAX_TICKETS_PER_REQUEST", "1000"))
    MAX_BADGE_EMAILS_PER_REQUEST: int = int(os.getenv("MAX_BADGE_EMAILS_PER_REQUEST", "50"))

    # ---------------------------
    # Email (SMTP)
    # ---------------------------
    SMTP_SERVER: str = os.getenv("SMTP_SERVER", "smtp.gmail.com")
    SMTP_PORT: int = int(os.getenv("SMTP_PORT", "587"))
    SMTP_USERNAME: str = os.getenv("SMTP_USERNAME", "")
    SMTP_PASSWORD: str = os.getenv("SMTP_PASSWORD", "")
    FROM_EMAIL: str = os.getenv("FROM_EMAIL", "noreply@example.com")
    FROM_NAME: str = os.getenv("FROM_NAME", "Badge System")
    BADGE_EMAIL_CC: Optional[str] = os.getenv("BADGE_EMAIL_CC")
    SEND_EMAILS: bool = os.getenv("SEND_EMAILS", "true").lower() == "true"
    EMAIL_TIMEOUT: int = int(os.getenv("EMAIL_TIMEOUT", "10"))
    EMAIL_SEND_DELAY_MS: int = int(os.getenv("EMAIL_SEND_DELAY_MS", "100"))

    # ---------------------------
    # Derived / Convenience
    # ---------------------------
    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT.lower() == "production"

    @property
    def is_development(self) -> bool:
        return self.ENVIRONMENT.lower() == "development"

    @property
    def google_private_key(self) -> Optional[str]:
        """Private key with escaped newlines restored (env vars usually carry '\\n')."""
        if not self.GOOGLE_SHEETS_PRIVATE_KEY:
            return None
        return self.GOOGLE_SHEETS_PRIVATE_KEY.replace("\\n", "\n")


settings = Settings()
