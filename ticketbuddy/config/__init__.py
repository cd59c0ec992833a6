"""
Configuration Module
====================

Application settings and configuration management using Pydantic.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import AliasChoices, Field, field_validator
from functools import lru_cache
from pathlib import Path
from typing import Optional


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Uses Pydantic for validation and type safety.
    """

    # ========== Application ==========
    app_name: str = Field(default="ticketbuddy", description="Application name")
    app_version: str = Field(default="1.0.0", description="Application version")
    environment: str = Field(default="development", description="Environment name")
    debug: bool = Field(default=False, description="Enable debug mode")
    log_level: str = Field(default="INFO", description="Root log level")

    # ========== Server ==========
    host: str = Field(default="0.0.0.0", description="Server host")
    port: int = Field(default=8787, description="Server port", ge=1, le=65535)

    # ========== Database ==========
    database_url: str = Field(
        default="postgresql+asyncpg://localhost:5432/ticketbuddy",
        description="Async SQLAlchemy connection URL"
    )
    db_pool_size: int = Field(default=5, description="Database connection pool size", ge=1)
    db_max_overflow: int = Field(default=10, description="Max overflow connections", ge=0)

    # ========== GitHub Integration ==========
    github_token: Optional[str] = Field(
        default=None,
        description="Bearer token used for all GitHub REST calls"
    )
    github_webhook_secret: Optional[str] = Field(
        default=None,
        description="Shared secret for X-Hub-Signature-256 verification"
    )
    github_api_url: str = Field(
        default="https://api.github.com",
        description="GitHub REST API base URL"
    )
    github_api_version: str = Field(
        default="2022-11-28",
        description="Value of the X-GitHub-Api-Version header"
    )
    github_user_agent: str = Field(
        default="ticketbuddy",
        description="User-Agent sent to GitHub"
    )
    github_resync_interval: int = Field(
        default=0,
        description="Seconds between full PR/issue resyncs of the linked repository (0 disables)",
        ge=0
    )

    # ========== LLM (OpenAI-compatible endpoint) ==========
    llm_api_key: Optional[str] = Field(
        default=None,
        description="API key for the hosted language model"
    )
    llm_base_url: Optional[str] = Field(
        default=None,
        description="Base URL of an OpenAI-compatible endpoint (None for api.openai.com)"
    )
    llm_model: str = Field(
        default="gpt-4o-mini",
        description="Chat model used for classification, diagnostics and copilot"
    )
    llm_temperature: float = Field(
        default=0.3,
        description="Default temperature for LLM",
        ge=0.0,
        le=1.0
    )
    llm_max_tokens: int = Field(
        default=1000,
        description="Default max tokens for LLM generation",
        ge=1,
        le=8000
    )
    mock_llm: bool = Field(
        default=False,
        description="Use mock LLM responses for testing (no API calls)"
    )

    # ========== Diagnostics ==========
    checkout_logs_path: Path = Field(
        default=Path("checkout_logs.yaml"),
        description="YAML/JSON log sample read by summarize_checkout_health"
    )

    # ========== MCP adapter ==========
    api_base_url: str = Field(
        default="http://localhost:8787",
        validation_alias=AliasChoices("TICKETBUDDY_API", "API_BASE_URL"),
        description="TicketBuddy HTTP API used by the MCP stdio adapter"
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Ensure environment is one of allowed values."""
        allowed = {"development", "staging", "production"}
        if v not in allowed:
            raise ValueError(f"environment must be one of {allowed}")
        return v


@lru_cache()
def get_settings() -> Settings:
    """Returns cached Settings instance."""
    return Settings()


# Global settings instance
settings = get_settings()


# ========== Constants ==========

class TicketStatus(str):
    """Ticket lifecycle statuses."""
    OPEN = "open"
    IN_PROGRESS = "in-progress"
    QA = "qa"
    RESOLVED = "resolved"


class Importance(int):
    """Ticket importance levels."""
    LOW = 1
    MEDIUM = 2
    HIGH = 3


class Severity(str):
    """Incident severity levels."""
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

