"""Tests for the built-in pipeline processors."""

import pytest

from recipe_forge.processors import (
    extract_json_array,
    extract_json_object,
    strip_code_fences,
)


class TestStripCodeFences:
    """Tests for removing Markdown code fences around model output."""

    def test_removes_fence_with_language_tag(self) -> None:
        text = '```json\n[{"title": "Mix"}]\n```'

        assert strip_code_fences(text) == '[{"title": "Mix"}]'

    def test_removes_bare_fence(self) -> None:
        assert strip_code_fences("```\nhello\n```\n") == "hello"

    def test_unfenced_text_is_only_stripped(self) -> None:
        assert strip_code_fences("  plain answer \n") == "plain answer"


class TestExtractJsonArray:
    """Tests for finding the first JSON array in free text."""

    def test_extracts_array_surrounded_by_prose(self) -> None:
        text = (
            "Sure! Here are the steps:\n"
            '[{"title": "Boil", "instructions": "Heat water."}]\n'
            "Enjoy."
        )

        assert extract_json_array(text) == [
            {"title": "Boil", "instructions": "Heat water."}
        ]

    def test_skips_bracketed_prose_that_is_not_json(self) -> None:
        text = "[Note] the answer is [1, 2, 3]"

        assert extract_json_array(text) == [1, 2, 3]

    def test_returns_first_array_only(self) -> None:
        assert extract_json_array("[1] then [2]") == [1]

    def test_raises_when_no_array(self) -> None:
        with pytest.raises(ValueError, match="No JSON array found"):
            extract_json_array('{"not": "an array"}')


class TestExtractJsonObject:
    """Tests for finding the first JSON object in free text."""

    def test_extracts_object_from_fenced_output(self) -> None:
        text = '```json\n{"title": "Stew", "seo": "beef stew"}\n```'

        assert extract_json_object(text) == {"title": "Stew", "seo": "beef stew"}

    def test_handles_braces_inside_strings(self) -> None:
        text = 'Result: {"description": "<p>Use {fresh} herbs</p>"} done'

        assert extract_json_object(text) == {"description": "<p>Use {fresh} herbs</p>"}

    def test_raises_when_no_object(self) -> None:
        with pytest.raises(ValueError, match="No JSON object found"):
            extract_json_object("no braces at all")
