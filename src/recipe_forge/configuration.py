"""Configuration for generation services.

Configuration supports both explicit instantiation and environment variable
fallback, and is validated at creation time so invalid settings are caught
before any provider is built.
"""

from __future__ import annotations

import os
from typing import Any, Self, override

from pydantic import BaseModel, ConfigDict, Field, field_validator

from recipe_forge.batch_runner import DEFAULT_MAX_WAIT, DEFAULT_POLL_INTERVAL
from recipe_forge.orchestrator import DEFAULT_CHUNK_SIZE, DEFAULT_SMALL_BATCH_THRESHOLD
from recipe_forge.providers.anthropic import (
    DEFAULT_MAX_INPUT_LENGTH,
    MAX_BATCH_REQUESTS,
)
from recipe_forge.providers.anthropic import DEFAULT_MODEL as ANTHROPIC_DEFAULT_MODEL
from recipe_forge.providers.openai import DEFAULT_MODEL as OPENAI_DEFAULT_MODEL

SUPPORTED_PROVIDERS = frozenset({"anthropic", "openai"})

_ENV_KEY_MAP = {
    "anthropic": "ANTHROPIC_API_KEY",
    "openai": "OPENAI_API_KEY",
}
_ENV_MODEL_MAP = {
    "anthropic": "ANTHROPIC_MODEL",
    "openai": "OPENAI_MODEL",
}
_ENV_NUMERIC_MAP = {
    "poll_interval_seconds": "RECIPE_FORGE_POLL_INTERVAL",
    "max_wait_seconds": "RECIPE_FORGE_MAX_WAIT",
    "chunk_size": "RECIPE_FORGE_CHUNK_SIZE",
    "small_batch_threshold": "RECIPE_FORGE_SMALL_BATCH_THRESHOLD",
}


class BaseConfiguration(BaseModel):
    """Base class for service configurations.

    Features:
        - Pydantic validation for type safety
        - Immutable (frozen) for configuration integrity
        - from_properties() factory method for dictionary-based creation
        - Strict validation (no extra fields allowed)
    """

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        validate_assignment=True,
    )

    @classmethod
    def from_properties(cls, properties: dict[str, Any]) -> Self:
        """Create configuration from a properties dictionary with validation.

        Subclasses override this to add environment variable support.

        Args:
            properties: Dictionary containing configuration properties

        Returns:
            Validated configuration instance

        Raises:
            ValidationError: If properties are invalid or missing required fields

        """
        return cls.model_validate(properties)


class GenerationConfiguration(BaseConfiguration):
    """Configuration for providers, batch polling and orchestration.

    Attributes:
        provider: Provider name (anthropic or openai)
        api_key: API key for the selected provider
        model: Optional model name (provider default if None)
        base_url: Base URL for OpenAI-compatible APIs
        max_input_length: Prompt character limit before truncation
        poll_interval_seconds: Delay between batch status polls
        max_wait_seconds: Wall-clock ceiling for one batch job
        chunk_size: Maximum requests per batch job
        small_batch_threshold: Request counts up to this value use direct calls
        max_batch_requests: Provider per-job cap enforced at submission

    Example:
        ```python
        # Explicit configuration
        config = GenerationConfiguration(provider="anthropic", api_key="sk-...")

        # Zero-config (reads from environment)
        config = GenerationConfiguration.from_properties({})
        ```

    """

    provider: str = Field(description="Provider: anthropic or openai")
    api_key: str = Field(description="API key for the provider")
    model: str | None = Field(
        default=None, description="Model name (provider default if None)"
    )
    base_url: str | None = Field(
        default=None,
        description="Base URL for OpenAI-compatible APIs (e.g., local LLMs)",
    )
    max_input_length: int = Field(default=DEFAULT_MAX_INPUT_LENGTH, gt=0)
    poll_interval_seconds: float = Field(default=DEFAULT_POLL_INTERVAL, gt=0)
    max_wait_seconds: float = Field(default=DEFAULT_MAX_WAIT, gt=0)
    chunk_size: int = Field(default=DEFAULT_CHUNK_SIZE, gt=0)
    small_batch_threshold: int = Field(default=DEFAULT_SMALL_BATCH_THRESHOLD, ge=0)
    max_batch_requests: int = Field(default=MAX_BATCH_REQUESTS, gt=0)

    @field_validator("provider")
    @classmethod
    def validate_provider(cls, v: str) -> str:
        """Validate that provider is one of the supported options.

        Raises:
            ValueError: If provider is not supported

        """
        provider_lower = v.lower()
        if provider_lower not in SUPPORTED_PROVIDERS:
            raise ValueError(
                f"Provider must be one of {sorted(SUPPORTED_PROVIDERS)}, got: {v}"
            )
        return provider_lower

    @field_validator("api_key")
    @classmethod
    def validate_api_key(cls, v: str) -> str:
        """Validate that API key is not empty.

        Raises:
            ValueError: If API key is empty or whitespace

        """
        if not v or not v.strip():
            raise ValueError("API key cannot be empty")
        return v.strip()

    @classmethod
    @override
    def from_properties(cls, properties: dict[str, Any]) -> Self:
        """Create configuration from properties with environment fallback.

        Layers, highest priority first:
        1. Explicit properties
        2. Environment variables
        3. Defaults

        Environment variables used:
        - LLM_PROVIDER: Provider name (default: "anthropic")
        - ANTHROPIC_API_KEY / OPENAI_API_KEY: API key for the provider
        - ANTHROPIC_MODEL / OPENAI_MODEL: Model for the provider
        - OPENAI_BASE_URL: Base URL (OpenAI only)
        - RECIPE_FORGE_POLL_INTERVAL, RECIPE_FORGE_MAX_WAIT,
          RECIPE_FORGE_CHUNK_SIZE, RECIPE_FORGE_SMALL_BATCH_THRESHOLD

        Args:
            properties: Configuration properties dictionary

        Returns:
            Validated configuration instance

        Raises:
            ValidationError: If configuration is invalid

        """
        config_data = properties.copy()

        if "provider" not in config_data:
            config_data["provider"] = os.getenv("LLM_PROVIDER", "anthropic")

        provider = str(config_data["provider"]).lower()

        if "api_key" not in config_data:
            config_data["api_key"] = os.getenv(_ENV_KEY_MAP.get(provider, ""), "")

        if "model" not in config_data:
            model_value = os.getenv(_ENV_MODEL_MAP.get(provider, ""))
            if model_value:
                config_data["model"] = model_value

        if "base_url" not in config_data and provider == "openai":
            base_url = os.getenv("OPENAI_BASE_URL")
            if base_url:
                config_data["base_url"] = base_url

        # Numeric settings are coerced by pydantic from their string form
        for field, env_var in _ENV_NUMERIC_MAP.items():
            if field not in config_data:
                env_value = os.getenv(env_var)
                if env_value:
                    config_data[field] = env_value

        return cls.model_validate(config_data)

    def get_default_model(self) -> str:
        """Get the configured model, or the provider default."""
        defaults = {
            "anthropic": ANTHROPIC_DEFAULT_MODEL,
            "openai": OPENAI_DEFAULT_MODEL,
        }
        return self.model or defaults[self.provider]
