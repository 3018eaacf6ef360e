"""Shared fixtures for provider integration tests.

These tests require real API keys and make actual API calls.
Run with: pytest -m integration
"""

import os
from pathlib import Path

import pytest
from dotenv import load_dotenv

# Load environment variables from .env so IDE test runners see the same keys
env_file = Path(__file__).parents[3] / ".env"
if env_file.exists():
    load_dotenv(env_file)


@pytest.fixture
def require_anthropic_api_key() -> str:
    """Skip test if ANTHROPIC_API_KEY is not set, otherwise return the key."""
    api_key = os.getenv("ANTHROPIC_API_KEY")
    if not api_key:
        pytest.skip("ANTHROPIC_API_KEY not set")
    return api_key


@pytest.fixture
def require_openai_api_key() -> str:
    """Skip test if OPENAI_API_KEY is not set, otherwise return the key."""
    api_key = os.getenv("OPENAI_API_KEY")
    if not api_key:
        pytest.skip("OPENAI_API_KEY not set")
    return api_key
