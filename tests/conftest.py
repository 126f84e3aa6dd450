"""Shared pytest fixtures for Hunt Radar tests."""

import sys
from datetime import datetime, timezone
from pathlib import Path
from unittest.mock import AsyncMock

import pytest

# Add project paths
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT / "src"))
sys.path.insert(0, str(PROJECT_ROOT))


@pytest.fixture
def project_root():
    """Return project root path."""
    return PROJECT_ROOT


@pytest.fixture(autouse=True)
def _no_credentials(monkeypatch):
    """Keep real credentials from a developer's environment out of tests."""
    for var in (
        "PRODUCTHUNT_API_TOKEN",
        "ALGOLIA_APP_ID",
        "ALGOLIA_SEARCH_API_KEY",
        "ALGOLIA_INDEX_NAME",
        "LLM_PROVIDER",
        "LLM_API_KEY",
        "LLM_MODEL",
        "LLM_BASE_URL",
        "ANTHROPIC_API_KEY",
    ):
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def wednesday_noon_utc():
    """2024-06-12 (a Wednesday) 18:00 UTC, 14:00 in New York."""
    return datetime(2024, 6, 12, 18, 0, tzinfo=timezone.utc)


@pytest.fixture
def sample_posts():
    return [
        {
            "id": "101",
            "name": "Alpha",
            "tagline": "Ship faster | with fewer bugs",
            "url": "https://www.producthunt.com/posts/alpha",
            "website": "https://alpha.example.com",
            "votesCount": 512,
            "thumbnail": "https://img.example.com/alpha.png",
        },
        {
            "id": "102",
            "name": "Beta",
            "tagline": "Second place\nstill great",
            "url": None,
            "website": "https://beta.example.com",
            "votesCount": 300,
            "thumbnail": None,
        },
    ]


@pytest.fixture
def mock_http():
    http = AsyncMock()
    http.post_json = AsyncMock(return_value=None)
    http.close = AsyncMock()
    return http
