"""Pytest configuration and fixtures."""

import os

import pytest

from ragchat.core.config import get_settings


@pytest.fixture(scope="session", autouse=True)
def setup_test_env():
    """Set up test environment variables."""
    os.environ["EMBEDDING_API_URL"] = "https://embed.test/embed"
    os.environ["SUPABASE_URL"] = "https://test.supabase.co"
    os.environ["SUPABASE_ANON_KEY"] = "test-anon-key"
    os.environ["ANTHROPIC_API_KEY"] = "test-anthropic-key"
    os.environ["RAGCHAT_ENV"] = "test"
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
