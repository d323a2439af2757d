from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field


class Settings(BaseSettings):
    """Runtime settings, read from the environment or ``.env``."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    ENV: str = Field(default="dev")  # dev|prod|test
    TZ: str = Field(default="Asia/Dubai")

    # Auth
    JWT_SECRET: str = Field(default="change-me")
    JWT_ALG: str = Field(default="HS256")
    JWT_EXPIRES_MIN: int = Field(default=60 * 12)

    # Storage
    DATABASE_URL: str = Field(default="postgresql+psycopg://app:app@db:5432/budgetdash")
    # facts and merge rules of one report are read in a single snapshot
    REPORT_ISOLATION_LEVEL: str = Field(default="REPEATABLE READ")

    CORS_ORIGINS: str = Field(default="http://localhost:3000,http://localhost")
    REDIS_URL: str = Field(default="redis://redis:6379/0")

    # Uploads / exports
    UPLOAD_DIR: str = Field(default="/app/data/uploads")
    EXPORT_DIR: str = Field(default="/app/data/exports")
    MAX_HTML_UPLOAD_MB: int = Field(default=20)

    # Budget files
    MAX_BUDGET_RECORDS: int = Field(default=10_000)
    MAX_RECORD_VALUE: float = Field(default=1_000_000_000.0)  # kg per record
    MAX_INVALID_RATIO: float = Field(default=0.1)
    # budget AMOUNT/MORM use the per-kg prices of (budget year - offset)
    PRICING_YEAR_OFFSET: int = Field(default=1)
    CURRENCY: str = Field(default="AED")

    # Seed (dev)
    SEED_ADMIN: bool = Field(default=True)
    ADMIN_LOGIN: str = Field(default="admin")
    ADMIN_PASSWORD: str = Field(default="admin123")


settings = Settings()
