"""
Settings isolation for unit tests.

Config comes only from monkeypatched environment variables: .env files are
ignored and the variables that steer derived settings start unset.
"""

import pytest

_DERIVED_SETTING_VARS = (
    "ENV",
    "ACCESS_TOKEN_PRESET",
    "EMAIL_PROVIDER",
    "JWT_SECRET",
    "JWT_REFRESH_SECRET",
    "LOG_FORMAT",
)


@pytest.fixture(autouse=True)
def isolated_settings_env(monkeypatch):
    import pydantic_settings.sources.providers.dotenv as dotenv_source

    monkeypatch.setattr(dotenv_source, "dotenv_values", lambda *args, **kwargs: {})
    for var in _DERIVED_SETTING_VARS:
        monkeypatch.delenv(var, raising=False)
