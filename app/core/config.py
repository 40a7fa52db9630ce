from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional
from decimal import Decimal
from pydantic import field_validator

class Settings(BaseSettings):
    # Database settings
    POSTGRES_USER: str = 'invoice_user'
    POSTGRES_PASSWORD: str = 'invoice_pass'
    POSTGRES_DB: str = 'invoice_db'
    POSTGRES_HOST: str = 'postgres'
    POSTGRES_PORT: int = 5432

    # Full URL override (e.g. sqlite:// for local runs and tests)
    DATABASE_URL: Optional[str] = None

    # JWT settings
    APP_SECRET_STRING: str = 'your-super-secret-key-here-change-in-production-2024'
    ALGORITHM: str = 'HS256'
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 7  # 7 days
    AUTH_COOKIE_NAME: str = 'token'

    # Pagination
    DEFAULT_PAGE_SIZE: int = 100
    MAX_PAGE_SIZE: int = 1000

    # Invoicing defaults
    DEFAULT_PAYMENT_TERMS: str = 'On Receipt'
    DEFAULT_TAX_RATE: Decimal = Decimal('18.00')
    LOW_STOCK_THRESHOLD: int = 5

    FRONTEND_URL: str = 'http://localhost:5000'

    # Environment
    ENVIRONMENT: str = "development"
    DEBUG: bool = True

    @property
    def database_url(self) -> str:
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return (
            f"postgresql+psycopg2://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}"
            f"@{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"
        )

    model_config = SettingsConfigDict(
        extra="allow",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True
    )

    @field_validator("DEBUG", mode="before")
    @classmethod
    def parse_debug(cls, v):
        if isinstance(v, str):
            return v.lower().strip('"').strip("'") in ("true", "1", "yes", "on")
        return bool(v)

settings = Settings()
