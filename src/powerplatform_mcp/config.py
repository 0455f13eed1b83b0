"""
Configuration management for Power Platform MCP Server
"""

import os
from pathlib import Path
from typing import Optional, Literal
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # Azure Authentication
    auth_provider: Literal["default", "client_secret", "mock"] = "default"
    azure_tenant_id: Optional[str] = None
    azure_client_id: Optional[str] = None
    azure_client_secret: Optional[str] = None

    # Fallback endpoints used when a tool call leaves them blank
    dataverse_org_url: Optional[str] = None
    flow_api_base_url: Optional[str] = None

    # HTTP
    http_timeout: float = 30.0

    log_level: str = "info"
    debug: bool = False

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


# Global settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get application settings singleton"""
    global _settings
    if _settings is None:
        load_dotenv_if_exists()

        import structlog
        logger = structlog.get_logger(__name__)

        try:
            _settings = Settings()
        except Exception as e:
            raise ValueError(f"Invalid configuration. Check your .env file: {e}") from e

        logger.info("Settings loaded",
                    auth_provider=_settings.auth_provider,
                    dataverse_org_url=_settings.dataverse_org_url,
                    flow_api_base_url=_settings.flow_api_base_url,
                    cwd=os.getcwd())
    return _settings


def load_dotenv_if_exists() -> None:
    """Load .env file if it exists"""
    from dotenv import load_dotenv

    env_path = Path(".env")
    if env_path.exists():
        load_dotenv(env_path)
    else:
        # Try to load from parent directories
        current = Path.cwd()
        for parent in [current] + list(current.parents):
            env_path = parent / ".env"
            if env_path.exists():
                load_dotenv(env_path)
                break
