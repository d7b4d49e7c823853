"""Configuration loading from environment variables."""

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

TransportType = Literal["stdio", "http"]
LogLevel = Literal["debug", "info", "warn", "error"]


class Settings(BaseSettings):
    """Application settings loaded from MCP_* environment variables."""

    # Transport selection
    transport: TransportType = "stdio"

    # Host and port (http transport)
    host: str = "0.0.0.0"
    port: int = Field(default=8080, ge=1, le=65535)

    # Server info
    server_name: str = "Teahouse MCP Server"
    server_version: str = "1.0.0"

    # Timeouts, in seconds
    request_timeout: float = Field(default=30.0, gt=0)
    shutdown_timeout: float = Field(default=5.0, gt=0)
    read_timeout: float = Field(default=30.0, gt=0)
    write_timeout: float = Field(default=30.0, gt=0)
    idle_timeout: float = Field(default=120.0, gt=0)
    sse_ping_interval: float = Field(default=15.0, gt=0)

    # Logging
    log_level: LogLevel = "info"
    log_format: Literal["console", "json"] = "console"

    model_config = SettingsConfigDict(
        env_prefix="MCP_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    @property
    def http_enabled(self) -> bool:
        """Check if the HTTP transport is selected."""
        return self.transport == "http"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
