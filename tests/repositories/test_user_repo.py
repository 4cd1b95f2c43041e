"""Tests for UserRepository."""

import pytest

from viewings.models.identity import Identity, Role
from viewings.repositories.user_repo import UserRepository


@pytest.mark.asyncio
async def test_upsert_and_get_by_id(user_repo: UserRepository):
    await user_repo.upsert(Identity(id="u-1", name="Jean Dupont", email="Jean@Example.com"))

    identity = await user_repo.get_by_id("u-1")

    assert identity is not None
    assert identity.name == "Jean Dupont"
    assert identity.email == "jean@example.com"
    assert identity.role == Role.USER


@pytest.mark.asyncio
async def test_get_by_id_missing(user_repo: UserRepository):
    assert await user_repo.get_by_id("nobody") is None


@pytest.mark.asyncio
async def test_upsert_updates_existing(user_repo: UserRepository):
    """A changed account email replaces the stored one."""
    await user_repo.upsert(Identity(id="u-1", name="Jean", email="old@example.com"))
    await user_repo.upsert(Identity(id="u-1", name="Jean D.", email="new@example.com"))

    identity = await user_repo.get_by_id("u-1")

    assert identity.name == "Jean D."
    assert identity.email == "new@example.com"


@pytest.mark.asyncio
async def test_get_by_email_is_case_insensitive(user_repo: UserRepository):
    await user_repo.upsert(Identity(id="u-1", name="Jean", email="jean@example.com"))

    identity = await user_repo.get_by_email("  JEAN@example.COM ")

    assert identity is not None
    assert identity.id == "u-1"


@pytest.mark.asyncio
async def test_list_admins_only_returns_admins(user_repo: UserRepository):
    await user_repo.upsert(Identity(id="u-1", name="Jean", email="jean@example.com"))
    await user_repo.upsert(
        Identity(id="a-2", name="Karim", email="karim@agency.tn", role=Role.ADMIN)
    )
    await user_repo.upsert(
        Identity(id="a-1", name="Sandra", email="sandra@agency.tn", role=Role.ADMIN)
    )

    admins = await user_repo.list_admins()

    assert [a.email for a in admins] == ["karim@agency.tn", "sandra@agency.tn"]
    assert all(a.is_admin for a in admins)
