"""
Configuration management for Dynamoscan using Pydantic settings.

Every field can be overridden through an environment variable carrying the
``DYNAMOSCAN_`` prefix, or through a ``.env`` file in the working directory.
"""

from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def load_environment(env_path: Optional[Path] = None) -> None:
    """Load environment variables from .env file if it exists."""
    env_path = env_path or Path.cwd() / ".env"
    if env_path.exists():
        load_dotenv(dotenv_path=env_path, override=False)


class Network(str, Enum):
    """Solana clusters the analyzer knows how to talk to."""
    MAINNET_BETA = "mainnet-beta"
    DEVNET = "devnet"
    TESTNET = "testnet"


class LogLevel(str, Enum):
    """Logging level options."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_prefix="DYNAMOSCAN_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # Chain data source
    RPC_URL: str = Field(
        "https://api.mainnet-beta.solana.com",
        description="Solana JSON-RPC endpoint",
    )
    DEFAULT_NETWORK: Network = Field(
        Network.MAINNET_BETA,
        description="Network tag reported when a request does not name one",
    )
    REQUEST_TIMEOUT: int = Field(30, gt=0, description="RPC timeout in seconds")
    MAX_RETRIES: int = Field(3, ge=0, description="Retries for connection failures")

    # Analysis
    CACHE_MAX_ENTRIES: int = Field(1000, gt=0, description="Result cache capacity")
    AUDIT_SIGNATURE_SAMPLE: int = Field(
        100, ge=0, description="Recent signatures sampled per contract audit"
    )
    AUDIT_FETCH_CONCURRENCY: int = Field(
        8, gt=0, description="Concurrent transaction fetches while sampling"
    )
    ENABLE_INSTRUCTION_SAMPLING: bool = Field(
        True, description="Count instructions of recent program transactions"
    )

    # Logging
    LOG_LEVEL: LogLevel = Field(LogLevel.INFO, description="Logging level")
    LOG_FORMAT: str = Field(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Log message format",
    )
    JSON_LOGS: bool = Field(False, description="Use JSON format for logs")

    # HTTP surface
    HOST: str = Field("0.0.0.0", description="Bind address for the API server")
    PORT: int = Field(8080, gt=0, lt=65536, description="Bind port for the API server")
    CORS_ORIGINS: List[str] = Field(["*"], description="Allowed CORS origins")

    @field_validator("LOG_LEVEL", mode="before")
    @classmethod
    def normalize_log_level(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.upper()
        return v

    @field_validator("RPC_URL")
    @classmethod
    def validate_rpc_url(cls, v: str) -> str:
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"RPC_URL must be an http(s) URL, got {v!r}")
        return v.rstrip("/")

    @classmethod
    def from_env(cls) -> "Settings":
        """Create settings instance with environment variable overrides."""
        load_environment()
        return cls()


# Global settings instance
settings = Settings.from_env()


def get_config() -> Dict[str, Any]:
    """Get configuration as a dictionary."""
    return settings.model_dump()
