"""Unit tests for AppSettings and sub-configs."""

import pytest
from pydantic import ValidationError as PydanticValidationError

from config import (
    ACCESS_TOKEN_PRESETS,
    AppSettings,
    DatabaseSettings,
    EmailSettings,
    JWTSettings,
    OTPSettings,
)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def with_mongo(monkeypatch):
    """Set the required MONGODB_URI so AppSettings can be instantiated."""
    monkeypatch.setenv("MONGODB_URI", "mongodb://localhost:27017/")
    for var in ("ENV", "ACCESS_TOKEN_PRESET", "EMAIL_PROVIDER"):
        monkeypatch.delenv(var, raising=False)
    return monkeypatch


# ---------------------------------------------------------------------------
# DatabaseSettings
# ---------------------------------------------------------------------------


class TestDatabaseSettings:
    def test_loads_mongodb_uri(self, monkeypatch):
        monkeypatch.setenv("MONGODB_URI", "mongodb://localhost:27017/")
        assert DatabaseSettings().mongodb_uri == "mongodb://localhost:27017/"

    def test_default_db_name(self, monkeypatch):
        monkeypatch.setenv("MONGODB_URI", "mongodb://localhost:27017/")
        monkeypatch.delenv("DB_NAME", raising=False)
        assert DatabaseSettings().db_name == "identity"

    def test_missing_mongodb_uri_raises(self, monkeypatch):
        monkeypatch.delenv("MONGODB_URI", raising=False)
        with pytest.raises(PydanticValidationError):
            DatabaseSettings()


# ---------------------------------------------------------------------------
# JWTSettings / OTPSettings / EmailSettings
# ---------------------------------------------------------------------------


class TestJWTSettings:
    def test_defaults(self, monkeypatch):
        for var in (
            "JWT_ISSUER",
            "JWT_AUDIENCE",
            "JWT_SECRET",
            "JWT_REFRESH_SECRET",
            "ACCESS_TOKEN_PRESET",
            "REFRESH_TOKEN_TTL_DAYS",
        ):
            monkeypatch.delenv(var, raising=False)
        s = JWTSettings()
        assert s.jwt_issuer == "identity-service"
        assert s.jwt_audience == "identity-service.api"
        assert s.refresh_token_ttl_days == 30
        assert s.access_token_preset is None

    def test_refresh_secret_falls_back_to_access_secret(self, monkeypatch):
        monkeypatch.setenv("JWT_SECRET", "access")
        monkeypatch.delenv("JWT_REFRESH_SECRET", raising=False)
        assert JWTSettings().refresh_secret == "access"

    def test_refresh_secret_used_when_set(self, monkeypatch):
        monkeypatch.setenv("JWT_SECRET", "access")
        monkeypatch.setenv("JWT_REFRESH_SECRET", "refresh")
        assert JWTSettings().refresh_secret == "refresh"

    def test_unknown_preset_rejected(self, monkeypatch):
        monkeypatch.setenv("ACCESS_TOKEN_PRESET", "forever")
        with pytest.raises(PydanticValidationError):
            JWTSettings()


def test_otp_defaults(monkeypatch):
    monkeypatch.delenv("OTP_LENGTH", raising=False)
    monkeypatch.delenv("OTP_EXPIRY_MINUTES", raising=False)
    s = OTPSettings()
    assert s.otp_length == 6
    assert s.otp_expiry_minutes == 10


def test_email_provider_unset_by_default(monkeypatch):
    monkeypatch.delenv("EMAIL_PROVIDER", raising=False)
    assert EmailSettings().email_provider is None


def test_presets():
    assert ACCESS_TOKEN_PRESETS == {"standard": 1800, "development": 60}


# ---------------------------------------------------------------------------
# AppSettings
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    "env, expected",
    [("production", True), ("development", False)],
    ids=["production", "development"],
)
def test_is_production(with_mongo, env, expected):
    with_mongo.setenv("ENV", env)
    assert AppSettings().is_production is expected


@pytest.mark.parametrize(
    "env, preset, ttl",
    [
        ("development", "development", 60),
        ("production", "standard", 1800),
        ("staging", "standard", 1800),
    ],
    ids=["development", "production", "staging"],
)
def test_access_preset_derived_from_env(with_mongo, env, preset, ttl):
    with_mongo.setenv("ENV", env)
    s = AppSettings()
    assert s.jwt.access_token_preset == preset
    assert s.access_token_ttl_seconds == ttl


def test_explicit_preset_wins_over_env(with_mongo):
    with_mongo.setenv("ENV", "development")
    with_mongo.setenv("ACCESS_TOKEN_PRESET", "standard")
    assert AppSettings().access_token_ttl_seconds == 1800


@pytest.mark.parametrize(
    "env, provider",
    [("production", "zeptomail"), ("development", "outbox")],
    ids=["production", "development"],
)
def test_email_provider_derived_from_env(with_mongo, env, provider):
    with_mongo.setenv("ENV", env)
    assert AppSettings().email.email_provider == provider


class TestAppSettings:
    def test_sub_configs_populated(self, with_mongo):
        s = AppSettings()
        for attr in ("db", "jwt", "otp", "email", "logging", "sentry"):
            assert getattr(s, attr) is not None, f"sub-config '{attr}' is None"

    def test_cors_origins_default(self, with_mongo):
        with_mongo.delenv("CORS_ORIGINS", raising=False)
        assert AppSettings().cors_origins == ["*"]

    def test_defaults(self, with_mongo):
        with_mongo.delenv("APP_NAME", raising=False)
        s = AppSettings()
        assert s.env == "development"
        assert s.app_name == "identity-service"
