"""Unit tests for grant administration use cases."""

import asyncio
from datetime import timedelta
from uuid import uuid4

import pytest

from grantgate.application.use_cases.permission.grant_permission import GrantPermissionUseCase
from grantgate.application.use_cases.permission.revoke_grant import RevokeGrantUseCase
from grantgate.application.use_cases.permission.update_grant import UpdateGrantUseCase
from grantgate.domain.exceptions import InvalidRequest, NotFound
from grantgate.domain.value_objects import ScopeSet

from tests.conftest import T0, group, make_grant, user


# --- GrantPermissionUseCase ---


@pytest.mark.asyncio
async def test_grant_creates_new_grant(fake_uow, uow_factory) -> None:
    payroll = fake_uow.resources.add("payroll")
    use_case = GrantPermissionUseCase(unit_of_work_factory=uow_factory)

    grant = await use_case.execute(
        "admin", group("finance"), payroll.id, ScopeSet.parse("@r@c"), subject_name="Finance"
    )

    stored = await fake_uow.grants.get_by_id(grant.id)
    assert stored is grant
    assert grant.granted_by == "admin"
    assert grant.subject_name == "Finance"
    assert grant.enabled


@pytest.mark.asyncio
async def test_grant_replaces_existing_enabled_grant(fake_uow, uow_factory) -> None:
    payroll = fake_uow.resources.add("payroll")
    existing = fake_uow.grants.add(
        make_grant(user("alice"), payroll, "@r", subject_name="Alice")
    )
    use_case = GrantPermissionUseCase(unit_of_work_factory=uow_factory)

    grant = await use_case.execute(
        "admin", user("alice"), payroll.id, ScopeSet.parse("@u"), inherit_to_children=True
    )

    assert grant.id == existing.id
    assert grant.scopes == ScopeSet.parse("@u")
    assert grant.inherit_to_children
    assert grant.subject_name == "Alice"
    assert len(await fake_uow.grants.list_by_resource(payroll.id)) == 1


@pytest.mark.asyncio
async def test_concurrent_grants_leave_one_enabled_grant(fake_uow, uow_factory) -> None:
    payroll = fake_uow.resources.add("payroll")
    use_case = GrantPermissionUseCase(unit_of_work_factory=uow_factory)

    first, second = await asyncio.gather(
        use_case.execute("admin", user("alice"), payroll.id, ScopeSet.parse("@r")),
        use_case.execute("root", user("alice"), payroll.id, ScopeSet.parse("@r@u")),
    )

    stored = await fake_uow.grants.list_by_resource(payroll.id)
    assert first.id == second.id
    assert [g.id for g in stored] == [first.id]
    assert stored[0].granted_by == "root"


@pytest.mark.asyncio
async def test_grant_after_revoke_creates_new_grant(fake_uow, uow_factory) -> None:
    payroll = fake_uow.resources.add("payroll")
    revoked = fake_uow.grants.add(make_grant(user("alice"), payroll, "@r", enabled=False))
    use_case = GrantPermissionUseCase(unit_of_work_factory=uow_factory)

    grant = await use_case.execute("admin", user("alice"), payroll.id, ScopeSet.parse("@c"))

    assert grant.id != revoked.id
    assert not revoked.enabled
    assert revoked.scopes == ScopeSet.parse("@r")
    assert len(await fake_uow.grants.list_by_resource(payroll.id)) == 2


@pytest.mark.asyncio
async def test_grant_requires_scopes(fake_uow, uow_factory) -> None:
    payroll = fake_uow.resources.add("payroll")
    use_case = GrantPermissionUseCase(unit_of_work_factory=uow_factory)

    with pytest.raises(InvalidRequest):
        await use_case.execute("admin", user("alice"), payroll.id, ScopeSet.empty())


@pytest.mark.asyncio
async def test_grant_unknown_resource_raises_not_found(uow_factory) -> None:
    use_case = GrantPermissionUseCase(unit_of_work_factory=uow_factory)

    with pytest.raises(NotFound, match="Resource"):
        await use_case.execute("admin", user("alice"), uuid4(), ScopeSet.parse("@r"))


# --- UpdateGrantUseCase ---


@pytest.mark.asyncio
async def test_update_changes_only_given_fields(fake_uow, uow_factory) -> None:
    payroll = fake_uow.resources.add("payroll")
    expiry = T0 + timedelta(days=30)
    grant = fake_uow.grants.add(
        make_grant(user("alice"), payroll, "@r", inherit_to_children=True, expires_at=expiry)
    )
    use_case = UpdateGrantUseCase(unit_of_work_factory=uow_factory)

    updated = await use_case.execute(grant.id, scopes=ScopeSet.parse("@r@d"))

    assert updated.scopes == ScopeSet.parse("@r@d")
    assert updated.inherit_to_children
    assert updated.expires_at == expiry


@pytest.mark.asyncio
async def test_update_can_clear_expiry(fake_uow, uow_factory) -> None:
    payroll = fake_uow.resources.add("payroll")
    grant = fake_uow.grants.add(make_grant(user("alice"), payroll, "@r", expires_at=T0))
    use_case = UpdateGrantUseCase(unit_of_work_factory=uow_factory)

    updated = await use_case.execute(grant.id, expires_at=None)

    assert updated.expires_at is None


@pytest.mark.asyncio
async def test_update_rejects_empty_scopes_and_unknown_grant(uow_factory) -> None:
    use_case = UpdateGrantUseCase(unit_of_work_factory=uow_factory)

    with pytest.raises(InvalidRequest):
        await use_case.execute(uuid4(), scopes=ScopeSet.empty())
    with pytest.raises(NotFound):
        await use_case.execute(uuid4(), inherit_to_children=False)


# --- RevokeGrantUseCase ---


@pytest.mark.asyncio
async def test_revoke_disables_grants(fake_uow, uow_factory) -> None:
    payroll = fake_uow.resources.add("payroll")
    first = fake_uow.grants.add(make_grant(user("alice"), payroll, "@r"))
    second = fake_uow.grants.add(make_grant(user("bob"), payroll, "@r"))
    use_case = RevokeGrantUseCase(unit_of_work_factory=uow_factory)

    count = await use_case.execute([first.id, second.id, uuid4()])

    assert count == 2
    assert not first.enabled
    assert not second.enabled


@pytest.mark.asyncio
async def test_revoke_nothing_disabled_raises_not_found(fake_uow, uow_factory) -> None:
    payroll = fake_uow.resources.add("payroll")
    grant = fake_uow.grants.add(make_grant(user("alice"), payroll, "@r", enabled=False))
    use_case = RevokeGrantUseCase(unit_of_work_factory=uow_factory)

    with pytest.raises(NotFound):
        await use_case.execute([grant.id])
    with pytest.raises(InvalidRequest):
        await use_case.execute([])
