"""
Configuration management for LLM Leaderboard.

Settings come from the process environment. A `.env` file at the project
root is loaded first with python-dotenv, without overriding variables that
are already set.

Usage:
    from llm_leaderboard.config import config

    db_url = config.database.connection_string
    port = config.api.port
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

# Look for .env in project root (parent of src/)
env_path = Path(__file__).parent.parent.parent / ".env"
if env_path.exists():
    load_dotenv(env_path)

DEFAULT_DATABASE_URL = "sqlite:///llm_leaderboard.db"
DEFAULT_CORS_ORIGINS = "http://localhost:3000,http://localhost:5173"
DEFAULT_AZURE_API_VERSION = "2024-02-15-preview"


@dataclass
class ProviderConfig:
    """
    Connection settings for one LLM client.

    Built from a stored provider/model pair by
    ``providers.factory.ProviderClientFactory``.
    """
    name: str
    api_key: Optional[str] = None
    endpoint: Optional[str] = None
    model: Optional[str] = None
    deployment_name: Optional[str] = None
    api_version: Optional[str] = None


@dataclass
class DatabaseConfig:
    """Store location."""
    connection_string: str

    def __post_init__(self):
        # An empty DATABASE_URL means the default file store
        if not self.connection_string:
            self.connection_string = DEFAULT_DATABASE_URL


@dataclass
class ApiConfig:
    """HTTP server configuration."""
    host: str = "127.0.0.1"
    port: int = 8000
    api_token: Optional[str] = None
    cors_origins: list[str] = field(default_factory=list)

    def __post_init__(self):
        if not isinstance(self.port, int):
            try:
                self.port = int(self.port)
            except (TypeError, ValueError) as e:
                raise ValueError(f"API_PORT must be an integer, got {self.port!r}") from e
        # Treat an empty token as "auth disabled"
        if not self.api_token:
            self.api_token = None


def _split_origins(raw: str) -> list[str]:
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


class Config:
    """
    All settings, read from the environment when constructed.

    The module-level ``config`` is built at import; tests and tools that
    change the environment construct their own ``Config()``.
    """

    def __init__(self):
        self.database = DatabaseConfig(
            connection_string=os.getenv("DATABASE_URL", DEFAULT_DATABASE_URL)
        )
        self.api = ApiConfig(
            host=os.getenv("API_HOST", "127.0.0.1"),
            port=os.getenv("API_PORT", "8000"),
            api_token=os.getenv("API_TOKEN"),
            cors_origins=_split_origins(os.getenv("CORS_ORIGINS", DEFAULT_CORS_ORIGINS)),
        )
        self.log_level = os.getenv("LOG_LEVEL", "INFO")
        self.azure_api_version = os.getenv(
            "AZURE_OPENAI_API_VERSION", DEFAULT_AZURE_API_VERSION
        )


config = Config()
