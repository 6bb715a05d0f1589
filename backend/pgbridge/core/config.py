"""Application configuration"""

from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings"""

    # API Settings
    API_HOST: str = "0.0.0.0"  # Override in .env
    API_PORT: int = 4000  # Override in .env
    DEBUG: bool = False  # Override in .env
    # development | production | test
    ENVIRONMENT: str = "development"
    # CORS: Comma-separated list of allowed origins
    # Examples: "http://localhost:3000,https://app.example.com"
    ALLOWED_ORIGINS: str = "http://localhost:3000"

    # Database
    # Required by the adapters; left empty here so the settings object can be
    # built without a database (tests, tooling). Adapters fail fast on "".
    DATABASE_URL: str = ""
    # sqlalchemy | asyncpg. Anything else falls back to sqlalchemy.
    DATABASE_ORM: str = "sqlalchemy"

    # Connection Pool Settings (asyncpg backend; SQLAlchemy uses its own pool)
    DB_MAX_CONNECTIONS: int = Field(default=10, ge=1)
    DB_IDLE_TIMEOUT: float = Field(default=30, gt=0)  # seconds
    DB_CONNECTION_TIMEOUT: float = Field(default=10, gt=0)  # seconds

    # Logging
    LOG_LEVEL: str = "INFO"

    # Sentry Error Tracking (optional - leave empty to disable)
    SENTRY_DSN: str = ""  # Override in .env

    # Skip database startup in the lifespan (test runs)
    TESTING: bool = False

    @property
    def allowed_origins_list(self) -> List[str]:
        """Parse allowed origins into list"""
        return [origin.strip() for origin in self.ALLOWED_ORIGINS.split(",")]

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT.lower() == "production"

    model_config = {
        "env_file": ".env",
        "case_sensitive": True,
        "extra": "ignore",  # Ignore extra environment variables not defined in Settings
    }


settings = Settings()
