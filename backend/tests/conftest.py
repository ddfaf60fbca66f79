"""Shared test fixtures and configuration."""
from pathlib import Path

import pytest

from thumbnail_studio.core.config import get_settings


@pytest.fixture(autouse=True)
def set_required_env_vars(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Isolate settings from the developer's environment for all tests."""
    monkeypatch.setenv("GEMINI_API_KEY", "")
    monkeypatch.setenv("GCP_PROJECT_ID", "")
    monkeypatch.setenv("VERTEX_AI_LOCATION", "us-central1")
    monkeypatch.setenv("CREDENTIALS_FILE", str(tmp_path / "credentials.json"))
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
