"""Shared fixtures."""

import pytest

from rootcause.config import Settings, get_settings


@pytest.fixture
def settings():
    return Settings(auth_token="sntrys_test", org="acme", _env_file=None)


@pytest.fixture(autouse=True)
def clear_settings_cache():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
