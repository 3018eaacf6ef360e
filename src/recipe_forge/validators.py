"""Built-in pipeline validators for generated recipe content.

Validators inspect a value and raise ``StepValidationError`` with a
human-readable reason to reject it. They never modify the value. Relaxed
fallback steps reuse the same validators with looser bounds::

    strict = DescriptionValidator()
    relaxed = DescriptionValidator(min_words=35, max_words=80)
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any

from bs4 import BeautifulSoup

from recipe_forge.errors import StepValidationError

_STRAY_AMPERSAND = re.compile(
    r"&(?![a-zA-Z][a-zA-Z0-9]{1,8};|#[0-9]{1,6};|#x[0-9a-fA-F]{1,6};)"
)
_STEP_FIELDS = frozenset({"title", "instructions"})


def validate_non_empty_text(text: Any) -> None:
    """Reject anything that is not a non-blank string."""
    if not isinstance(text, str) or not text.strip():
        raise StepValidationError("Expected non-empty text")


def validate_steps(response: Any) -> None:
    """Check a list of recipe steps.

    Every step must be an object with non-empty ``title`` and
    ``instructions`` strings and nothing else. One bad step rejects the
    whole response.
    """
    if not isinstance(response, list):
        raise StepValidationError("Expected a JSON array at the top level.")

    if len(response) < 1:
        raise StepValidationError("Expected at least 1 step.")

    for i, step in enumerate(response):
        if not isinstance(step, dict):
            raise StepValidationError(f"Step[{i}] must be an object.")

        for field in ("title", "instructions"):
            value = step.get(field)
            if not isinstance(value, str) or not value.strip():
                raise StepValidationError(
                    f"Step[{i}].{field} must be a non-empty string."
                )

        extras = sorted(set(step) - _STEP_FIELDS)
        if extras:
            raise StepValidationError(
                f"Step[{i}] has unknown fields: {', '.join(extras)}"
            )


@dataclass(frozen=True)
class RecipeContentValidator:
    """Check the title/description/seo object of a rewritten recipe."""

    title_min_chars: int = 20
    title_max_chars: int = 70
    seo_min_words: int = 2
    seo_max_words: int = 4

    def __call__(self, response: Any) -> None:
        if not isinstance(response, dict):
            raise StepValidationError("Response must be a JSON object")

        for field in ("title", "description", "seo"):
            value = response.get(field)
            if not isinstance(value, str) or not value:
                raise StepValidationError(f"Missing or invalid {field} field")

        title_length = len(response["title"].strip())
        if not self.title_min_chars <= title_length <= self.title_max_chars:
            raise StepValidationError(
                f"Title length {title_length} characters, should be "
                f"{self.title_min_chars}-{self.title_max_chars} characters"
            )

        seo_words = len(response["seo"].split())
        if not self.seo_min_words <= seo_words <= self.seo_max_words:
            raise StepValidationError(
                f"SEO field has {seo_words} words, should be "
                f"{self.seo_min_words}-{self.seo_max_words} words"
            )


@dataclass(frozen=True)
class DescriptionValidator:
    """Check the HTML ``description`` of a rewritten recipe.

    The description must consist of a bounded number of non-empty ``<p>``
    paragraphs, each with a bounded word count and a limited number of
    ``<strong>`` highlights.
    """

    min_paragraphs: int = 2
    max_paragraphs: int = 3
    min_words: int = 40
    max_words: int = 70
    max_strong_tags: int = 3

    def __call__(self, response: Any) -> None:
        description = None
        if isinstance(response, dict):
            description = response.get("description")
        if not isinstance(description, str):
            raise StepValidationError("Missing or invalid description field")

        cleaned = _STRAY_AMPERSAND.sub("&amp;", description).strip()
        soup = BeautifulSoup(cleaned, "html.parser")
        paragraphs = soup.find_all("p")

        if not paragraphs:
            raise StepValidationError("HTML must contain at least one <p> tag")

        if not self.min_paragraphs <= len(paragraphs) <= self.max_paragraphs:
            raise StepValidationError(
                f"HTML must contain {self.min_paragraphs}-{self.max_paragraphs} "
                f"paragraphs, found {len(paragraphs)}"
            )

        for number, paragraph in enumerate(paragraphs, start=1):
            text = paragraph.get_text().strip()
            if not text:
                raise StepValidationError(f"Paragraph {number} is empty")

            word_count = len(text.split())
            if not self.min_words <= word_count <= self.max_words:
                raise StepValidationError(
                    f"Paragraph {number} has {word_count} words, must be "
                    f"{self.min_words}-{self.max_words} words"
                )

            strong_count = len(paragraph.find_all("strong"))
            if strong_count > self.max_strong_tags:
                raise StepValidationError(
                    f"Paragraph {number} has {strong_count} <strong> tags, "
                    f"maximum {self.max_strong_tags} allowed"
                )
