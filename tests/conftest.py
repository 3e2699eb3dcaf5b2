"""
Pytest configuration and shared fixtures.
"""
import pytest

CREDENTIAL_ENV_VARS = (
    "OPENAI_API_KEY",
    "ANTHROPIC_API_KEY",
    "GEMINI_API_KEY",
    "YOUTUBE_API_KEY",
    "GOOGLE_SEARCH_API_KEY",
    "GOOGLE_SEARCH_ENGINE_ID",
)


@pytest.fixture(autouse=True)
def no_credentials(monkeypatch):
    """Every test starts with no provider or search credentials in the environment."""
    for name in CREDENTIAL_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
