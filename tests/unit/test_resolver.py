"""Unit tests for EffectivePermissionResolver."""

from datetime import timedelta

import pytest

from grantgate.application.use_cases.permission.resolve_permissions import (
    EffectivePermissionResolver,
)
from grantgate.domain.entities import Organization
from grantgate.domain.exceptions import ResourceUnknown
from grantgate.domain.value_objects import PermissionSource, ScopeSet, Subject, SubjectType

from tests.conftest import CLIENT_ID, T0, group, make_grant, organization, user

NOW = T0 + timedelta(days=1)


@pytest.fixture
def resolver(uow_factory) -> EffectivePermissionResolver:
    return EffectivePermissionResolver(uow_factory, clock=lambda: NOW)


@pytest.fixture
def payroll_tree(fake_uow):
    """payroll > reports > {monthly, yearly}, plus an unrelated sibling root."""
    resources = fake_uow.resources
    payroll = resources.add("payroll")
    reports = resources.add("reports", parent=payroll)
    monthly = resources.add("monthly", parent=reports)
    yearly = resources.add("yearly", parent=reports)
    archive = resources.add("archive", parent=payroll)
    hr = resources.add("hr")
    return {
        "payroll": payroll,
        "reports": reports,
        "monthly": monthly,
        "yearly": yearly,
        "archive": archive,
        "hr": hr,
    }


def _by_code(permissions):
    return {p.resource_code: p for p in permissions}


@pytest.mark.asyncio
async def test_direct_grant_resolves_exactly(fake_uow, resolver, payroll_tree) -> None:
    fake_uow.grants.add(make_grant(user("alice"), payroll_tree["payroll"], "@r@c"))

    result = await resolver.resolve("alice")

    assert len(result) == 1
    assert result[0].resource_code == "payroll"
    assert result[0].scopes == ScopeSet.parse("@r@c")
    assert result[0].source == PermissionSource.DIRECT


@pytest.mark.asyncio
async def test_group_grant_propagates_to_descendants(fake_uow, resolver, payroll_tree) -> None:
    fake_uow.grants.add(make_grant(user("alice"), payroll_tree["payroll"], "@r@c"))
    fake_uow.grants.add(
        make_grant(
            group("finance"),
            payroll_tree["reports"],
            "@r",
            inherit_to_children=True,
            subject_name="Finance",
        )
    )
    fake_uow.memberships.add_membership("alice", group("finance"), "Finance")

    result = _by_code(await resolver.resolve("alice"))

    assert set(result) == {"payroll", "reports", "monthly", "yearly"}
    assert result["payroll"].scopes == ScopeSet.parse("@r@c")
    assert result["reports"].source == PermissionSource.GROUP
    assert result["reports"].source_name == "Finance"
    for code in ("reports", "monthly", "yearly"):
        assert result[code].scopes == ScopeSet.parse("@r")


@pytest.mark.asyncio
async def test_inheritance_never_reaches_ancestors_or_siblings(
    fake_uow, resolver, payroll_tree
) -> None:
    fake_uow.grants.add(
        make_grant(user("alice"), payroll_tree["reports"], "@u", inherit_to_children=True)
    )

    result = _by_code(await resolver.resolve("alice"))

    assert "payroll" not in result
    assert "archive" not in result
    assert "hr" not in result


@pytest.mark.asyncio
async def test_non_inherited_grant_stays_on_its_resource(fake_uow, resolver, payroll_tree) -> None:
    fake_uow.grants.add(make_grant(user("alice"), payroll_tree["reports"], "@u"))

    result = _by_code(await resolver.resolve("alice"))

    assert set(result) == {"reports"}


@pytest.mark.asyncio
async def test_scopes_union_with_direct_first_provenance(fake_uow, resolver, payroll_tree) -> None:
    fake_uow.grants.add(
        make_grant(
            group("finance"),
            payroll_tree["payroll"],
            "@r@e",
            inherit_to_children=True,
            granted_at=T0 - timedelta(days=10),
        )
    )
    fake_uow.grants.add(make_grant(user("alice"), payroll_tree["reports"], "@u@d"))
    fake_uow.memberships.add_membership("alice", group("finance"))

    reports = _by_code(await resolver.resolve("alice"))["reports"]

    assert reports.scopes == ScopeSet.parse("@r@u@d@e")
    assert reports.source == PermissionSource.DIRECT
    assert [p.source for p in reports.provenance] == [
        PermissionSource.DIRECT,
        PermissionSource.GROUP,
    ]


@pytest.mark.asyncio
async def test_expired_and_disabled_grants_are_ignored(fake_uow, resolver, payroll_tree) -> None:
    fake_uow.grants.add(
        make_grant(user("alice"), payroll_tree["payroll"], "@r", expires_at=NOW)
    )
    fake_uow.grants.add(make_grant(user("alice"), payroll_tree["hr"], "@r", enabled=False))
    fake_uow.grants.add(
        make_grant(
            user("alice"), payroll_tree["archive"], "@d", expires_at=NOW + timedelta(seconds=1)
        )
    )

    result = _by_code(await resolver.resolve("alice"))

    assert set(result) == {"archive"}


@pytest.mark.asyncio
async def test_role_grants_are_not_resolved(fake_uow, resolver, payroll_tree) -> None:
    role = Subject(SubjectType.ROLE, "auditor")
    fake_uow.grants.add(make_grant(role, payroll_tree["payroll"], "@r"))
    fake_uow.memberships.add_membership("alice", role)

    assert await resolver.resolve("alice") == []


@pytest.mark.asyncio
async def test_organization_ancestors_pass_inheritable_grants(
    fake_uow, resolver, payroll_tree
) -> None:
    fake_uow.memberships.add_organization(Organization("corp", "Corp"))
    fake_uow.memberships.add_organization(Organization("emea", "EMEA", parent_id="corp"))
    fake_uow.memberships.add_organization(
        Organization("berlin", "Berlin", parent_id="emea", inherit_parent_permissions=False)
    )
    fake_uow.memberships.add_organization(Organization("paris", "Paris", parent_id="emea"))
    fake_uow.grants.add(
        make_grant(organization("corp"), payroll_tree["hr"], "@r", inherit_to_children=True)
    )
    fake_uow.grants.add(make_grant(organization("emea"), payroll_tree["archive"], "@d"))

    fake_uow.memberships.add_membership("alice", organization("paris"))
    fake_uow.memberships.add_membership("bob", organization("berlin"))

    alice = _by_code(await resolver.resolve("alice"))
    bob = await resolver.resolve("bob")

    assert set(alice) == {"hr"}
    assert alice["hr"].source == PermissionSource.ORGANIZATION
    assert alice["hr"].source_id == "corp"
    assert bob == []


@pytest.mark.asyncio
async def test_grant_on_disabled_resource_is_skipped(fake_uow, resolver) -> None:
    hidden = fake_uow.resources.add("hidden", enabled=False)
    fake_uow.grants.add(make_grant(user("alice"), hidden, "@r"))

    assert await resolver.resolve("alice") == []


@pytest.mark.asyncio
async def test_check_maps_each_requested_scope(fake_uow, resolver, payroll_tree) -> None:
    fake_uow.grants.add(
        make_grant(user("alice"), payroll_tree["payroll"], "@r@c", inherit_to_children=True)
    )

    assert await resolver.check("alice", CLIENT_ID, "monthly", "@r@d") == {"r": True, "d": False}
    assert await resolver.check("alice", CLIENT_ID, "monthly") == {
        "r": True,
        "c": True,
        "u": False,
        "d": False,
        "e": False,
    }


@pytest.mark.asyncio
async def test_check_with_wildcard_grant(fake_uow, resolver, payroll_tree) -> None:
    fake_uow.grants.add(make_grant(user("alice"), payroll_tree["hr"], "@all"))

    assert await resolver.check("alice", CLIENT_ID, "hr", ["u", "e"]) == {"u": True, "e": True}


@pytest.mark.asyncio
async def test_check_unknown_resource_raises(resolver, payroll_tree) -> None:
    with pytest.raises(ResourceUnknown):
        await resolver.check("alice", CLIENT_ID, "missing")


@pytest.mark.asyncio
async def test_check_ignores_resources_of_other_clients(fake_uow, resolver) -> None:
    crm = fake_uow.resources.add("accounts", client_id="crm")
    fake_uow.grants.add(make_grant(user("alice"), crm, "@r"))

    with pytest.raises(ResourceUnknown):
        await resolver.check("alice", CLIENT_ID, "accounts")
    assert await resolver.check("alice", "crm", "accounts", "@r") == {"r": True}
