"""Generation service factory.

Builds providers, batch runners and orchestrators from a validated
``GenerationConfiguration``.
"""

from __future__ import annotations

import logging

from recipe_forge.batch_runner import BatchJobRunner
from recipe_forge.configuration import GenerationConfiguration
from recipe_forge.errors import LLMConfigurationError
from recipe_forge.orchestrator import BatchOrchestrator
from recipe_forge.providers.anthropic import AnthropicProvider
from recipe_forge.providers.openai import OpenAIProvider
from recipe_forge.providers.protocol import BatchJobProvider, CompletionProvider

logger = logging.getLogger(__name__)


class GenerationServiceFactory:
    """Factory for creating generation service instances.

    Example:
        ```python
        config = GenerationConfiguration.from_properties({})
        orchestrator = GenerationServiceFactory.create_orchestrator(config)
        results = await orchestrator.ask_batch(requests)
        ```

    """

    @staticmethod
    def create_provider(config: GenerationConfiguration) -> CompletionProvider:
        """Create the provider named by the configuration.

        Args:
            config: Validated generation configuration.

        Returns:
            Configured AnthropicProvider or OpenAIProvider instance.

        Raises:
            LLMConfigurationError: If the provider is not supported.

        """
        if config.provider == "anthropic":
            return AnthropicProvider(
                api_key=config.api_key,
                model=config.get_default_model(),
                max_input_length=config.max_input_length,
                max_batch_requests=config.max_batch_requests,
            )
        elif config.provider == "openai":
            return OpenAIProvider(
                api_key=config.api_key,
                model=config.get_default_model(),
                base_url=config.base_url,
                max_input_length=config.max_input_length,
            )
        else:
            raise LLMConfigurationError(
                f"Unsupported LLM provider: '{config.provider}'. "
                f"Supported providers: 'anthropic', 'openai'."
            )

    @staticmethod
    def create_batch_runner(
        config: GenerationConfiguration,
        provider: CompletionProvider | None = None,
    ) -> BatchJobRunner:
        """Create a batch job runner using the configured polling settings.

        Args:
            config: Validated generation configuration.
            provider: Existing provider to reuse (created from config if None).

        Returns:
            Configured BatchJobRunner instance.

        Raises:
            LLMConfigurationError: If the provider cannot run batch jobs.

        """
        provider = provider or GenerationServiceFactory.create_provider(config)
        if not isinstance(provider, BatchJobProvider):
            raise LLMConfigurationError(
                f"Provider '{config.provider}' does not support batch jobs"
            )

        return BatchJobRunner(
            provider,
            poll_interval=config.poll_interval_seconds,
            max_wait=config.max_wait_seconds,
        )

    @staticmethod
    def create_orchestrator(config: GenerationConfiguration) -> BatchOrchestrator:
        """Create a batch orchestrator sharing one provider for both paths.

        Args:
            config: Validated generation configuration.

        Returns:
            Configured BatchOrchestrator instance.

        Raises:
            LLMConfigurationError: If the provider cannot run batch jobs.

        """
        provider = GenerationServiceFactory.create_provider(config)
        runner = GenerationServiceFactory.create_batch_runner(config, provider)

        logger.info(
            f"Batch orchestrator created (provider={config.provider}, "
            f"model={config.get_default_model()}, chunk_size={config.chunk_size})"
        )
        return BatchOrchestrator(
            provider,
            runner,
            chunk_size=config.chunk_size,
            small_batch_threshold=config.small_batch_threshold,
        )
