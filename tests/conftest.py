"""Pytest fixtures for grantgate tests."""

from __future__ import annotations

import json
import time
from collections.abc import AsyncIterator, Sequence
from contextlib import asynccontextmanager
from datetime import UTC, datetime, timedelta
from uuid import UUID, uuid4

import jwt
import pytest
from cryptography.hazmat.primitives.asymmetric import rsa
from jwt.algorithms import RSAAlgorithm

from grantgate.application.dto.upstream import UpstreamResponse
from grantgate.domain.entities import (
    Membership,
    Organization,
    PermissionCheckLog,
    PermissionGrant,
    PermissionResource,
    PermissionScope,
    RegisteredClient,
    RevokedToken,
    UserProfile,
)
from grantgate.domain.value_objects import ScopeSet, Subject, SubjectType
from grantgate.infrastructure.auth.client_authenticator import hash_client_secret
from grantgate.infrastructure.auth.jwks_cache import SigningKeyCache

ISSUER = "https://idp.example.test"
CLIENT_ID = "payroll-app"
CLIENT_SECRET = "s3cret"
T0 = datetime(2026, 1, 1, tzinfo=UTC)


# --- Fake repositories ---


class FakeGrantRepository:
    """In-memory grant repository."""

    def __init__(self) -> None:
        self._by_id: dict[UUID, PermissionGrant] = {}

    async def get_by_id(self, grant_id: UUID) -> PermissionGrant | None:
        return self._by_id.get(grant_id)

    async def list_for_subjects(self, subjects: Sequence[Subject]) -> list[PermissionGrant]:
        wanted = {(s.type, s.id) for s in subjects}
        items = [g for g in self._by_id.values() if (g.subject_type, g.subject_id) in wanted]
        return sorted(items, key=lambda g: g.granted_at)

    async def list_by_subject(self, subject: Subject) -> list[PermissionGrant]:
        return await self.list_for_subjects([subject])

    async def list_by_resource(self, resource_id: UUID) -> list[PermissionGrant]:
        items = [g for g in self._by_id.values() if g.resource_id == resource_id]
        return sorted(items, key=lambda g: g.granted_at)

    async def upsert_enabled(self, grant: PermissionGrant) -> tuple[PermissionGrant, bool]:
        for existing in self._by_id.values():
            if (
                existing.subject == grant.subject
                and existing.resource_id == grant.resource_id
                and existing.enabled
            ):
                existing.scopes = grant.scopes
                existing.inherit_to_children = grant.inherit_to_children
                existing.expires_at = grant.expires_at
                existing.subject_name = grant.subject_name or existing.subject_name
                existing.granted_by = grant.granted_by
                return existing, False
        self._by_id[grant.id] = grant
        return grant, True

    async def update(self, grant: PermissionGrant) -> None:
        self._by_id[grant.id] = grant

    async def disable(self, grant_ids: Sequence[UUID]) -> int:
        count = 0
        for grant_id in grant_ids:
            grant = self._by_id.get(grant_id)
            if grant and grant.enabled:
                grant.enabled = False
                count += 1
        return count

    def add(self, grant: PermissionGrant) -> PermissionGrant:
        """Helper to seed a grant."""
        self._by_id[grant.id] = grant
        return grant


class FakeResourceRepository:
    """In-memory resource repository."""

    def __init__(self) -> None:
        self._by_id: dict[UUID, PermissionResource] = {}

    async def get_by_id(self, resource_id: UUID) -> PermissionResource | None:
        return self._by_id.get(resource_id)

    async def list_enabled(self, client_id: str | None = None) -> list[PermissionResource]:
        return [
            r
            for r in self._by_id.values()
            if r.enabled and (client_id is None or r.client_id == client_id)
        ]

    def add(
        self,
        code: str,
        parent: PermissionResource | None = None,
        client_id: str = CLIENT_ID,
        client_name: str | None = "Payroll",
        sort_order: int = 0,
        enabled: bool = True,
    ) -> PermissionResource:
        """Helper to seed a resource named after its code."""
        resource = PermissionResource(
            id=uuid4(),
            client_id=client_id,
            client_name=client_name,
            code=code,
            name=code.title(),
            parent_id=parent.id if parent else None,
            sort_order=sort_order,
            enabled=enabled,
        )
        self._by_id[resource.id] = resource
        return resource


class FakeScopeRepository:
    """Scope reference data with the standard codes."""

    def __init__(self) -> None:
        self._scopes = [
            PermissionScope("r", "Read", sort_order=1),
            PermissionScope("c", "Create", sort_order=2),
            PermissionScope("u", "Update", sort_order=3),
            PermissionScope("d", "Delete", sort_order=4),
            PermissionScope("e", "Export", sort_order=5),
        ]

    async def list_all(self) -> list[PermissionScope]:
        return list(self._scopes)


class FakeMembershipRepository:
    """In-memory memberships and organization hierarchy."""

    def __init__(self) -> None:
        self._by_user: dict[str, list[Membership]] = {}
        self._organizations: dict[str, Organization] = {}

    async def list_for_user(self, user_id: str) -> list[Membership]:
        return list(self._by_user.get(user_id, []))

    async def get_organization(self, organization_id: str) -> Organization | None:
        return self._organizations.get(organization_id)

    def add_membership(self, user_id: str, subject: Subject, name: str | None = None) -> None:
        self._by_user.setdefault(user_id, []).append(Membership(subject, name))

    def add_organization(self, organization: Organization) -> None:
        self._organizations[organization.id] = organization


class FakeRevokedTokenRepository:
    """In-memory revoked token table keyed by jti."""

    def __init__(self) -> None:
        self._by_jti: dict[str, RevokedToken] = {}
        self.exists_calls = 0

    async def insert_if_absent(self, token: RevokedToken) -> bool:
        if token.jti in self._by_jti:
            return False
        self._by_jti[token.jti] = token
        return True

    async def exists(self, jti: str) -> bool:
        self.exists_calls += 1
        return jti in self._by_jti

    async def get(self, jti: str) -> RevokedToken | None:
        return self._by_jti.get(jti)

    async def list_page(
        self,
        offset: int,
        limit: int,
        subject_id: str | None = None,
        client_id: str | None = None,
    ) -> tuple[list[RevokedToken], int]:
        items = [
            t
            for t in self._by_jti.values()
            if (subject_id is None or t.subject_id == subject_id)
            and (client_id is None or t.client_id == client_id)
        ]
        items.sort(key=lambda t: t.revoked_at, reverse=True)
        return items[offset : offset + limit], len(items)

    async def delete_expired_before(self, cutoff: datetime) -> int:
        expired = [
            jti
            for jti, t in self._by_jti.items()
            if t.expiration_time is not None and t.expiration_time < cutoff
        ]
        for jti in expired:
            del self._by_jti[jti]
        return len(expired)


class FakeClientRepository:
    """In-memory registered clients."""

    def __init__(self) -> None:
        self._by_id: dict[str, RegisteredClient] = {}

    async def get_by_client_id(self, client_id: str) -> RegisteredClient | None:
        return self._by_id.get(client_id)

    def add(self, client: RegisteredClient) -> None:
        self._by_id[client.client_id] = client


class FakeUserRepository:
    """In-memory user profiles."""

    def __init__(self) -> None:
        self._by_subject: dict[str, UserProfile] = {}

    async def get_by_subject_id(self, subject_id: str) -> UserProfile | None:
        return self._by_subject.get(subject_id)

    def add(self, user: UserProfile) -> None:
        self._by_subject[user.subject_id] = user


class FakeCheckLogRepository:
    """Collects permission check log entries."""

    def __init__(self) -> None:
        self.entries: list[PermissionCheckLog] = []

    async def add(self, entry: PermissionCheckLog) -> None:
        self.entries.append(entry)


# --- Fake UnitOfWork ---


class FakeUnitOfWork:
    """In-memory Unit of Work with fake repositories."""

    def __init__(self) -> None:
        self.grants = FakeGrantRepository()
        self.resources = FakeResourceRepository()
        self.scopes = FakeScopeRepository()
        self.memberships = FakeMembershipRepository()
        self.revoked_tokens = FakeRevokedTokenRepository()
        self.clients = FakeClientRepository()
        self.users = FakeUserRepository()
        self.check_logs = FakeCheckLogRepository()

    async def commit(self) -> None:
        pass

    async def rollback(self) -> None:
        pass


def make_uow_factory(uow: FakeUnitOfWork):
    """Factory yielding the same FakeUnitOfWork on every call, so state persists."""

    @asynccontextmanager
    async def _factory() -> AsyncIterator[FakeUnitOfWork]:
        yield uow

    return _factory


def make_grant(
    subject: Subject,
    resource: PermissionResource,
    scopes: str,
    inherit_to_children: bool = False,
    granted_at: datetime = T0,
    enabled: bool = True,
    expires_at: datetime | None = None,
    subject_name: str | None = None,
) -> PermissionGrant:
    return PermissionGrant(
        id=uuid4(),
        subject_type=subject.type,
        subject_id=subject.id,
        subject_name=subject_name,
        resource_id=resource.id,
        scopes=ScopeSet.parse(scopes),
        inherit_to_children=inherit_to_children,
        enabled=enabled,
        expires_at=expires_at,
        granted_at=granted_at,
    )


def user(user_id: str) -> Subject:
    return Subject(SubjectType.USER, user_id)


def group(group_id: str) -> Subject:
    return Subject(SubjectType.GROUP, group_id)


def organization(organization_id: str) -> Subject:
    return Subject(SubjectType.ORGANIZATION, organization_id)


# --- Tokens ---


class TokenIssuer:
    """RSA signing keys and a JWKS document for minting test tokens."""

    def __init__(self, kid: str = "key-1") -> None:
        self.kid = kid
        self._private_key = rsa.generate_private_key(public_exponent=65537, key_size=2048)

    def jwk(self) -> dict:
        key = json.loads(RSAAlgorithm.to_jwk(self._private_key.public_key()))
        key.update({"kid": self.kid, "use": "sig", "alg": "RS256"})
        return key

    def jwks(self) -> dict:
        return {"keys": [self.jwk()]}

    def sign(self, claims: dict, headers: dict | None = None, algorithm: str = "RS256") -> str:
        return jwt.encode(
            claims,
            self._private_key,
            algorithm=algorithm,
            headers={"kid": self.kid, **(headers or {})},
        )

    def access_token(self, sub: str = "alice", jti: str | None = None, ttl: int = 300, **extra) -> str:
        now = int(time.time())
        claims = {
            "iss": ISSUER,
            "sub": sub,
            "exp": now + ttl,
            "iat": now - 1,
            "client_id": CLIENT_ID,
            "jti": jti or uuid4().hex,
            "name": sub.title(),
        }
        claims.update(extra)
        return self.sign(claims)


class FakeJwksFetcher:
    """Async JWKS fetcher whose published document can be swapped."""

    def __init__(self, document: dict, issuer: str = ISSUER) -> None:
        self.document = document
        self.issuer = issuer
        self.calls = 0
        self.error: Exception | None = None

    async def __call__(self) -> tuple[dict, str]:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.document, self.issuer


class FakeIdentityProvider:
    """Identity provider returning canned introspection and revocation responses."""

    def __init__(self) -> None:
        self.introspection = UpstreamResponse(200, UpstreamResponse.encode_json({"active": False}))
        self.revocation = UpstreamResponse(200, b"")
        self.calls: list[tuple[str, dict, str | None]] = []

    def introspects_as(self, body: dict, status: int = 200) -> None:
        self.introspection = UpstreamResponse(
            status, UpstreamResponse.encode_json(body), "application/json"
        )

    async def introspect(self, form, authorization):
        self.calls.append(("introspect", dict(form), authorization))
        return self.introspection

    async def revoke(self, form, authorization):
        self.calls.append(("revoke", dict(form), authorization))
        return self.revocation


# --- Fixtures ---


@pytest.fixture
def fake_uow() -> FakeUnitOfWork:
    """Fresh in-memory UnitOfWork for each test."""
    return FakeUnitOfWork()


@pytest.fixture
def uow_factory(fake_uow):
    """Factory returning async context manager with the test's FakeUnitOfWork."""
    return make_uow_factory(fake_uow)


@pytest.fixture(scope="session")
def token_issuer() -> TokenIssuer:
    return TokenIssuer()


@pytest.fixture
def jwks_fetcher(token_issuer) -> FakeJwksFetcher:
    return FakeJwksFetcher(token_issuer.jwks())


@pytest.fixture
def key_cache(jwks_fetcher) -> SigningKeyCache:
    return SigningKeyCache(jwks_fetcher, min_refresh_interval=timedelta(0))


@pytest.fixture
def identity_provider() -> FakeIdentityProvider:
    return FakeIdentityProvider()


@pytest.fixture
def registered_client(fake_uow) -> RegisteredClient:
    client = RegisteredClient(
        client_id=CLIENT_ID,
        client_name="Payroll",
        secrets=[hash_client_secret(CLIENT_SECRET)],
    )
    fake_uow.clients.add(client)
    return client
