"""
Configuration management using Pydantic settings.
"""
from typing import List, Optional, Union
import os
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from dotenv import load_dotenv
load_dotenv()


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True, extra="ignore")

    PROJECT_NAME: str = "Test Tracker"
    ENV: str = os.getenv("ENV", "development")

    # Database Configuration
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./test_tracker.db")

    # Server Configuration
    SERVER_HOST: str = os.getenv("SERVER_HOST", "localhost")
    PORT: int = int(os.getenv("PORT", 8000))
    SSL_CERTFILE: Optional[str] = os.getenv("SSL_CERTFILE")
    SSL_KEYFILE: Optional[str] = os.getenv("SSL_KEYFILE")
    LOG_DIR: Optional[str] = os.getenv("LOG_DIR")

    # CORS Configuration
    BACKEND_CORS_ORIGINS: Union[List[str], str] = "*"

    @field_validator("BACKEND_CORS_ORIGINS", mode="before")
    @classmethod
    def assemble_cors_origins(cls, v):
        if v == "*" or v == ["*"]:
            return "*"
        if isinstance(v, str):
            return [i.strip() for i in v.split(",")]
        return v

    # Client Configuration
    SERVER_URL: str = os.getenv("SERVER_URL", "http://localhost:8000/")
    CLIENT_TIMEOUT_SECONDS: float = float(os.getenv("CLIENT_TIMEOUT_SECONDS", 10))
    CLIENT_STORAGE_PATH: str = os.getenv("CLIENT_STORAGE_PATH", "./.test_tracker_storage.json")


settings = Settings()
