from pydantic_settings import BaseSettings
from pydantic import model_validator
from urllib.parse import quote_plus
import os


class Settings(BaseSettings):
    APP_ENV: str = "local"

    # Database URL - can be provided directly or constructed from components.
    # When neither is configured the app runs on the local JSON store.
    DATABASE_URL: str | None = None

    # Individual database components (for constructing DATABASE_URL)
    DB_HOST: str = "localhost"
    DB_PORT: int = 5432
    DB_USER: str = "postgres"
    DB_PASSWORD: str = ""
    DB_NAME: str = ""
    DB_ECHO: bool = False

    # Local key/value store (used when no database is configured)
    LOCAL_STORE_PATH: str = "data/local_store"

    # Ledger settings
    AMOUNT_TOLERANCE: float = 0.01
    CUSTOMER_ID_START: int = 100000

    # Other settings
    CORS_ORIGINS: list[str] = [
        "http://localhost:5173",
        "http://localhost:3000",
    ]

    class Config:
        env_file = ".env" if os.getenv("APP_ENV", "local") == "local" else ".env.prod"
        env_file_encoding = "utf-8"
        extra = "ignore"

    @model_validator(mode='after')
    def construct_database_url(self):
        """Construct DATABASE_URL from components if DB_NAME is given and no URL is set."""
        if not self.DATABASE_URL and self.DB_NAME:
            # URL encode password to handle special characters
            password_part = f":{quote_plus(self.DB_PASSWORD)}" if self.DB_PASSWORD else ""
            self.DATABASE_URL = (
                f"postgresql+psycopg://{self.DB_USER}{password_part}"
                f"@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"
            )
        return self

    @property
    def use_database(self) -> bool:
        """True when the remote SQL backend should be used."""
        return bool(self.DATABASE_URL)

    @property
    def database_url(self) -> str:
        """Get DATABASE_URL as a guaranteed string, switched to an async driver."""
        assert self.DATABASE_URL is not None, "DATABASE_URL must be set"
        url = self.DATABASE_URL
        if url.startswith("postgresql://"):
            url = url.replace("postgresql://", "postgresql+psycopg://", 1)
        elif url.startswith("sqlite:///"):
            url = url.replace("sqlite:///", "sqlite+aiosqlite:///", 1)
        return url


settings = Settings()
