"""
Shared fixtures: in-memory stores, a controllable clock and fully wired
services over them.
"""

from __future__ import annotations

import pytest

from fakes import (
    ACCESS_SECRET,
    REFRESH_SECRET,
    FakeClock,
    FakeOneTimeCodeStore,
    FakeRefreshTokenStore,
    FakeUserStore,
    latest_code,
)
from infrastructure.email.outbox import OutboxEmailProvider
from infrastructure.email.templates import EmailTemplates
from services.identity_service import IdentityService
from services.otp_service import OneTimeCodeService
from services.token_service import TokenService


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def user_store():
    return FakeUserStore()


@pytest.fixture
def code_store():
    return FakeOneTimeCodeStore()


@pytest.fixture
def token_store():
    return FakeRefreshTokenStore()


@pytest.fixture
def outbox():
    return OutboxEmailProvider(preview_base_url="http://localhost:8000")


@pytest.fixture
def templates():
    return EmailTemplates(app_name="identity-service")


@pytest.fixture
def token_service(token_store):
    return TokenService(
        token_store,
        access_secret=ACCESS_SECRET,
        refresh_secret=REFRESH_SECRET,
        access_ttl_seconds=1800,
    )


@pytest.fixture
def otp_service(code_store, outbox, templates, clock):
    return OneTimeCodeService(code_store, outbox, templates, clock=clock)


@pytest.fixture
def identity(user_store, otp_service, token_service):
    return IdentityService(
        user_store, otp_service, token_service, expose_email_preview=True
    )


@pytest.fixture
def read_code(outbox):
    """Return a helper that reads the latest mailed code for an address."""
    return lambda email: latest_code(outbox, email)
