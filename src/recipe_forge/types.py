"""Request types shared by completion providers and the batch client.

These are pure value objects, immutable after creation.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class GenerationOptions(BaseModel):
    """Sampling parameters for a single generation.

    Every field defaults to ``None``, meaning the provider default applies.
    Providers ignore parameters their backend does not support.
    """

    model_config = ConfigDict(frozen=True)

    temperature: float | None = None
    top_p: float | None = None
    stop: list[str] | None = None
    max_tokens: int | None = Field(default=None, gt=0)
    presence_penalty: float | None = None
    frequency_penalty: float | None = None

    def merged(self, override: "GenerationOptions | None") -> "GenerationOptions":
        """Return these options with every non-None field of ``override`` applied."""
        if override is None:
            return self
        return GenerationOptions.model_validate(
            self.model_dump(exclude_none=True) | override.model_dump(exclude_none=True)
        )


class GenerationRequest(BaseModel):
    """A prompt plus the optional model, system text and sampling parameters.

    The ``prompt`` is an opaque payload: either text or any object that can be
    serialised to JSON (dicts, lists, pydantic models). It is turned into text
    by the provider right before dispatch.
    """

    model_config = ConfigDict(frozen=True)

    prompt: Any
    model: str | None = None
    system: str | None = None
    options: GenerationOptions | None = None
