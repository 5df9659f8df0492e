"""Completion client configuration with environment variable loading.

Pydantic-based configuration for the remote chat-completion API.
Supports OpenAI and OpenAI-compatible APIs via custom base URL.
"""

import os

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, field_validator

# Load environment variables from .env file
load_dotenv()


def _optional_env(name: str) -> str | None:
    value = os.getenv(name, "").strip()
    return value or None


class CompletionConfig(BaseModel):
    """Configuration for the remote completion API.

    Supports OpenAI and any OpenAI-compatible API via LLM_BASE_URL.

    Attributes:
        api_key: API key for model access.
        base_url: API base URL (None for OpenAI default).
        model_name: Model identifier to use.
        temperature: Optional sampling temperature, sent only when set.
        max_tokens: Optional response token cap, sent only when set.
        timeout: Remote request timeout in seconds.
    """

    # Environment values arrive as strings and must pass the same checks
    model_config = ConfigDict(validate_default=True, protected_namespaces=())

    api_key: str = Field(
        default_factory=lambda: (
            os.getenv("OPENAI_API_KEY") or os.getenv("LLM_API_KEY", "")
        ),
        description="API key for the completion provider",
    )
    base_url: str | None = Field(
        default_factory=lambda: _optional_env("LLM_BASE_URL"),
        description="API base URL (None for OpenAI default)",
    )
    model_name: str = Field(
        default_factory=lambda: os.getenv("LLM_MODEL", "gpt-3.5-turbo"),
        description="Model to use",
    )
    temperature: float | None = Field(
        default_factory=lambda: _optional_env("LLM_TEMPERATURE"),
        ge=0.0,
        le=2.0,
        description="Sampling temperature for response generation",
    )
    max_tokens: int | None = Field(
        default_factory=lambda: _optional_env("LLM_MAX_TOKENS"),
        ge=1,
        le=128000,
        description="Maximum tokens in generated response",
    )
    timeout: float = Field(
        default_factory=lambda: os.getenv("LLM_TIMEOUT", "60"),
        gt=0.0,
        description="Remote request timeout in seconds",
    )

    @field_validator("api_key")
    @classmethod
    def validate_api_key(cls, v: str) -> str:
        """Validate that API key is provided and non-empty."""
        if not v or not v.strip():
            raise ValueError("OPENAI_API_KEY is required. Set it in the environment or .env")
        return v.strip()


def get_completion_config() -> CompletionConfig:
    """Create completion configuration from environment.

    Returns:
        Configured CompletionConfig instance.

    Raises:
        ValidationError: If no API key is set.
    """
    return CompletionConfig()
