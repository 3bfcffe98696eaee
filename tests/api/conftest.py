"""Fixtures for API tests."""

import pytest
from falcon.testing import TestClient

from grantgate.config import Settings
from grantgate.domain.entities import UserProfile
from grantgate.main import create_grantgate_app

from tests.conftest import group, make_grant, user

ALLOWED_ORIGIN = "https://console.example.test"


@pytest.fixture
def settings() -> Settings:
    return Settings(_env_file=None, cors_origins=ALLOWED_ORIGIN)


@pytest.fixture
def seeded(fake_uow, registered_client):
    """payroll > reports > monthly for payroll-app; alice holds grants, bob none."""
    fake_uow.users.add(UserProfile("alice", user_name="alice"))
    fake_uow.users.add(UserProfile("bob", user_name="bob"))
    payroll = fake_uow.resources.add("payroll")
    reports = fake_uow.resources.add("reports", parent=payroll)
    monthly = fake_uow.resources.add("monthly", parent=reports)
    fake_uow.grants.add(make_grant(user("alice"), payroll, "@r@c"))
    fake_uow.grants.add(make_grant(group("finance"), reports, "@r", inherit_to_children=True))
    fake_uow.memberships.add_membership("alice", group("finance"))
    return {"payroll": payroll, "reports": reports, "monthly": monthly}


@pytest.fixture
def app(settings, uow_factory, key_cache, identity_provider):
    """Falcon ASGI app wired to in-memory storage, a fake issuer and a fake identity provider."""
    return create_grantgate_app(
        settings,
        uow_factory=uow_factory,
        key_provider=key_cache,
        identity_provider=identity_provider,
    )


@pytest.fixture
def client(app) -> TestClient:
    """Falcon ASGI test client."""
    return TestClient(app)


@pytest.fixture
def admin_headers(token_issuer) -> dict[str, str]:
    return {"Authorization": f"Bearer {token_issuer.access_token(sub='admin')}"}
