"""Application settings"""
from pydantic_settings import BaseSettings
from typing import Optional


class Settings(BaseSettings):
    """Application settings"""

    # Application
    APP_NAME: str = "Internal Portal Resource API"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # API
    API_V1_PREFIX: str = "/api/v1"
    DEFAULT_PAGE_SIZE: int = 20
    MAX_PAGE_SIZE: int = 100

    # Database
    DATABASE_URL: Optional[str] = None
    DATABASE_TYPE: str = "sqlite"  # sqlite, postgresql
    DB_HOST: str = "localhost"
    DB_PORT: int = 5432
    DB_NAME: str = "portal"
    DB_USER: str = "postgres"
    DB_PASSWORD: str = "postgres"

    # Assignment engine
    ASSIGNMENT_MAX_RETRIES: int = 1  # extra attempts after a concurrency conflict

    class Config:
        env_file = ".env"
        case_sensitive = True

    def get_database_url(self) -> str:
        """Get database URL from settings or environment"""
        if self.DATABASE_URL:
            return self.DATABASE_URL

        if self.DATABASE_TYPE == "postgresql":
            return f"postgresql://{self.DB_USER}:{self.DB_PASSWORD}@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"
        elif self.DATABASE_TYPE == "sqlite":
            return "sqlite:///./portal.db"
        else:
            raise ValueError(f"Unsupported database type: {self.DATABASE_TYPE}")


settings = Settings()
