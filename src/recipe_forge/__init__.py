"""LLM generation pipeline and batch execution for recipe content."""

__version__ = "0.1.0"

from recipe_forge.batch_runner import BatchJobRunner
from recipe_forge.batch_types import (
    BatchJobHandle,
    BatchJobStatus,
    BatchRequest,
    BatchResult,
    BatchResultStatus,
    ProcessingStats,
)
from recipe_forge.configuration import GenerationConfiguration
from recipe_forge.errors import (
    BatchJobError,
    BatchSubmissionError,
    BatchTimeoutError,
    EmptyResponseError,
    LLMConfigurationError,
    LLMConnectionError,
    LLMServiceError,
    RecipeForgeError,
    StepValidationError,
)
from recipe_forge.factory import GenerationServiceFactory
from recipe_forge.orchestrator import BatchOrchestrator
from recipe_forge.pipeline import Pipeline, PipelineResult, PipelineStep, pipeline
from recipe_forge.providers import (
    AnthropicProvider,
    BatchJobProvider,
    CompletionProvider,
    OpenAIProvider,
)
from recipe_forge.types import GenerationOptions, GenerationRequest

__all__ = [
    # Version
    "__version__",
    # Types
    "GenerationOptions",
    "GenerationRequest",
    "BatchRequest",
    "BatchResult",
    "BatchResultStatus",
    "BatchJobStatus",
    "BatchJobHandle",
    "ProcessingStats",
    # Errors
    "RecipeForgeError",
    "LLMServiceError",
    "LLMConfigurationError",
    "LLMConnectionError",
    "EmptyResponseError",
    "BatchSubmissionError",
    "BatchJobError",
    "BatchTimeoutError",
    "StepValidationError",
    # Providers
    "CompletionProvider",
    "BatchJobProvider",
    "AnthropicProvider",
    "OpenAIProvider",
    # Batch execution
    "BatchJobRunner",
    "BatchOrchestrator",
    # Pipeline
    "Pipeline",
    "PipelineStep",
    "PipelineResult",
    "pipeline",
    # Configuration
    "GenerationConfiguration",
    "GenerationServiceFactory",
]
