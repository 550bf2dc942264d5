"""Pydantic models for application configuration.

Configuration priority (lowest to highest):
1. Code defaults (defined in model Field defaults)
2. config.yaml file
3. Environment variables (optionally loaded from .env)
4. CLI arguments
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_MODEL = "gemini-2.5-flash"
DEFAULT_MAX_STEPS = 10

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class ConfigError(Exception):
    """Raised when configuration cannot be loaded or is invalid."""


class AppConfig(BaseModel):
    """Root configuration of the review agent."""

    model_config = ConfigDict(extra="forbid")

    # Model
    model: str = DEFAULT_MODEL
    provider: str | None = None  # Inferred from the model name when unset
    gemini_api_key: str | None = None
    model_parameters: dict[str, dict[str, Any]] = Field(default_factory=dict)
    debug_llm_messages: bool = False

    # Agent loop
    max_steps: int = Field(default=DEFAULT_MAX_STEPS, ge=1)

    # Tools
    exclude_files: list[str] = Field(default_factory=lambda: ["dist", "bun.lock"])
    git_timeout_seconds: float = Field(default=30.0, gt=0)
    max_read_file_bytes: int = Field(default=10 * 1024 * 1024, gt=0)

    log_level: LogLevel = "INFO"

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, value: Any) -> Any:  # noqa: ANN401
        if isinstance(value, str):
            return value.upper()
        return value

    def llm_client_config(self) -> dict[str, Any]:
        """Build the dict consumed by ``LLMClientFactory.create_client``."""
        return {
            "model": self.model,
            "provider": self.provider,
            "api_key": self.gemini_api_key,
            "model_parameters": self.model_parameters,
            "debug_messages": self.debug_llm_messages,
        }
