"""
Shared test fixtures.

Provides pytest fixtures for common test resources including:
- Language service configuration
- A working directory free of .env / video_intel.yaml
- Sample videos

Builders and fakes live in tests/helpers.py.
"""

import pytest

from video_intel.config import Config
from video_intel.models.entities import Video

LANGUAGE_AI_VARIABLES = (
    "LANGUAGE_AI_ENDPOINT",
    "LANGUAGE_AI_API_KEY",
    "LANGUAGE_AI_PROJECT_NAME",
    "LANGUAGE_AI_DEPLOYMENT_NAME",
)


@pytest.fixture
def test_config() -> Config:
    """
    Create test configuration with explicit values.

    Returns:
        Config: Test configuration
    """
    return Config(
        endpoint="https://lang.example.com/",
        api_key="test-key-1234",
        project_name="video-keywords",
        deployment_name="production",
        polling_interval=0.0,
        retry_backoff=0.0,
    )


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    """
    Run with no LANGUAGE_AI_* variables in an empty working directory.

    Yields:
        pytest.MonkeyPatch: For setting variables inside the test
    """
    for name in LANGUAGE_AI_VARIABLES:
        monkeypatch.delenv(name, raising=False)
        monkeypatch.delenv(name.lower(), raising=False)
    monkeypatch.chdir(tmp_path)
    yield monkeypatch


@pytest.fixture
def sample_video() -> Video:
    """A video with a description mentioning a few products."""
    return Video(
        video_id="vid-001",
        title="Unboxing",
        description_raw="Unboxing the Contoso X1 camera and Fabrikam tripod.",
    )
