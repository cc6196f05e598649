from pydantic import field_validator
from pydantic_settings import BaseSettings
from typing import List


class Settings(BaseSettings):
    # ─── Application ───────────────────────────────────────────────────────────
    APP_NAME:  str  = "Transport Desk"
    APP_ENV:   str  = "development"
    APP_DEBUG: bool = True
    APP_HOST:  str  = "0.0.0.0"
    APP_PORT:  int  = 8000
    APP_URL:   str  = "http://localhost:3000"   # driver portal link in emails

    # ─── Database ──────────────────────────────────────────────────────────────
    DATABASE_URL:          str
    DATABASE_POOL_SIZE:    int  = 10
    DATABASE_MAX_OVERFLOW: int  = 20
    DATABASE_POOL_TIMEOUT: int  = 30
    DATABASE_ECHO:         bool = False

    # ─── JWT ───────────────────────────────────────────────────────────────────
    SECRET_KEY:                  str
    ALGORITHM:                   str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 12

    # ─── Driver accounts ───────────────────────────────────────────────────────
    GENERATED_PASSWORD_LENGTH: int = 12

    # ─── OTP ───────────────────────────────────────────────────────────────────
    OTP_EXPIRE_MINUTES:         int = 10
    OTP_LENGTH:                 int = 6
    RESET_TOKEN_EXPIRE_MINUTES: int = 15

    # ─── Email ─────────────────────────────────────────────────────────────────
    # Empty SMTP_HOST = log-only delivery
    SMTP_HOST:     str = ""
    SMTP_PORT:     int = 25
    SMTP_USERNAME: str = ""
    SMTP_PASSWORD: str = ""
    SMTP_FROM:     str = "noreply@transport-desk.local"

    # ─── CORS ──────────────────────────────────────────────────────────────────
    CORS_ORIGINS: str = "http://localhost:3000,http://127.0.0.1:3000"

    @field_validator("DATABASE_URL", mode="after")
    @classmethod
    def normalize_database_url(cls, v: str) -> str:
        """Hosted Postgres gives postgres://; SQLAlchemy expects postgresql+psycopg2://."""
        if v and v.startswith("postgres://"):
            return "postgresql+psycopg2://" + v[len("postgres://"):]
        return v

    def get_cors_origins(self) -> List[str]:
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]

    @property
    def is_production(self) -> bool:
        return self.APP_ENV == "production"

    @property
    def is_development(self) -> bool:
        return self.APP_ENV == "development"

    @property
    def smtp_enabled(self) -> bool:
        return bool(self.SMTP_HOST)

    model_config = {"env_file": ".env", "case_sensitive": True, "extra": "ignore"}


settings = Settings()
