from pydantic_settings import BaseSettings
from typing import List, Optional, Union
from pydantic import field_validator
import json


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # API Settings
    PROJECT_NAME: str = "Job Bidding Marketplace API"
    ENVIRONMENT: str = "development"
    PORT: int = 5000

    # Database Settings
    POSTGRES_USER: str = "user"
    POSTGRES_PASSWORD: str = "password"
    POSTGRES_SERVER: str = "localhost"
    POSTGRES_PORT: str = "5432"
    POSTGRES_DB: str = "marketplace_db"
    DATABASE_URL_OVERRIDE: Optional[str] = None

    DB_POOL_SIZE: int = 10
    DB_MAX_OVERFLOW: int = 20
    DB_POOL_TIMEOUT: int = 10  # seconds to wait for a pooled connection

    @property
    def DATABASE_URL(self) -> str:
        if self.DATABASE_URL_OVERRIDE:
            return self.DATABASE_URL_OVERRIDE
        return f"postgresql://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}@{self.POSTGRES_SERVER}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"

    # Session token Settings
    SECRET_KEY: str = "change-me-in-production"
    ALGORITHM: str = "HS256"
    TOKEN_EXPIRE_DAYS: int = 7
    TOKEN_COOKIE_NAME: str = "token"

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT.lower() == "production"

    # CORS Settings - can be set as JSON string in .env
    BACKEND_CORS_ORIGINS: Union[List[str], str] = [
        "http://localhost:5173",
        "http://localhost:5174",
    ]

    @field_validator("BACKEND_CORS_ORIGINS", mode="before")
    @classmethod
    def parse_cors_origins(cls, v: Union[List[str], str]) -> List[str]:
        """Parse CORS origins from JSON string or list"""
        if isinstance(v, str):
            try:
                return json.loads(v)
            except json.JSONDecodeError:
                # If not valid JSON, split by comma
                return [origin.strip() for origin in v.split(",")]
        return v

    # Behaviour switches
    # PUT /job/{id} on a missing id: False -> 404, True -> create the document
    JOB_UPDATE_UPSERT: bool = False

    # Resilience
    STORE_RETRY_ATTEMPTS: int = 3
    REQUEST_TIMEOUT_SECONDS: float = 15.0

    # Logging
    LOG_LEVEL: str = "INFO"
    JSON_LOGS: bool = False

    class Config:
        env_file = ".env"
        case_sensitive = True


settings = Settings()
