"""Tests for the planet permission tiers."""

import pytest

from starship.core.exceptions import ForbiddenError, NotFoundError


class TestReadTier:
    @pytest.mark.asyncio
    async def test_public_planet_is_readable_by_anyone(self, services, planet, outsider):
        assert await services.permissions.read(None, planet)
        assert await services.permissions.read(outsider, planet)

    @pytest.mark.asyncio
    async def test_private_planet_requires_membership(self, services, private_planet, owner, member, outsider):
        permissions = services.permissions
        assert not await permissions.read(None, private_planet)
        assert not await permissions.read(outsider, private_planet)
        assert await permissions.read(member, private_planet)
        assert await permissions.read(owner, private_planet)

    @pytest.mark.asyncio
    async def test_admin_reads_private_planets(self, services, private_planet, admin_user):
        assert await services.permissions.read(admin_user, private_planet)

    @pytest.mark.asyncio
    async def test_ids_are_resolved(self, services, private_planet, member):
        assert await services.permissions.read(member.id, private_planet.id)

    @pytest.mark.asyncio
    async def test_missing_planet_raises_not_found(self, services, member):
        with pytest.raises(NotFoundError):
            await services.permissions.read(member, "missing")

    @pytest.mark.asyncio
    async def test_hidden_planet_raises_not_found(self, services, private_planet, outsider):
        with pytest.raises(NotFoundError):
            await services.permissions.ensure_read(outsider, private_planet.id)


class TestWriteTiers:
    @pytest.mark.asyncio
    async def test_public_write_is_open_on_public_planets(self, services, planet, outsider):
        assert await services.permissions.public_write(outsider, planet)
        assert not await services.permissions.full_write(outsider, planet)

    @pytest.mark.asyncio
    async def test_anonymous_never_writes(self, services, planet):
        assert not await services.permissions.public_write(None, planet)
        assert not await services.permissions.full_write(None, planet)

    @pytest.mark.asyncio
    async def test_members_have_full_write(self, services, planet, member, owner):
        assert await services.permissions.full_write(member, planet)
        assert await services.permissions.full_write(owner, planet)

    @pytest.mark.asyncio
    async def test_global_ban_refuses_every_write(self, services, planet, make_user):
        banned = await make_user("banned", banned=True)
        assert not await services.permissions.public_write(banned, planet)
        assert not await services.permissions.full_write(banned, planet)

    @pytest.mark.asyncio
    async def test_planet_ban_refuses_writes_even_for_members(self, services, planet, member):
        planet.banned.append(member.id)
        assert not await services.permissions.public_write(member, planet)
        assert not await services.permissions.full_write(member, planet)

    @pytest.mark.asyncio
    async def test_admin_bypass_precedes_ban(self, services, planet, make_user):
        banned_admin = await make_user("fallen", admin=True, banned=True)
        planet.banned.append(banned_admin.id)
        assert await services.permissions.public_write(banned_admin, planet)
        assert await services.permissions.full_write(banned_admin, planet)

    @pytest.mark.asyncio
    async def test_missing_planet_raises_not_found_for_admins(self, services, admin_user):
        with pytest.raises(NotFoundError):
            await services.permissions.public_write(admin_user, "no-such-planet")
        with pytest.raises(NotFoundError):
            await services.permissions.full_write(admin_user, "no-such-planet")

    @pytest.mark.asyncio
    async def test_missing_planet_raises_not_found_for_anonymous(self, services):
        with pytest.raises(NotFoundError):
            await services.permissions.public_write(None, "no-such-planet")
        with pytest.raises(NotFoundError):
            await services.permissions.full_write(None, "no-such-planet")

    @pytest.mark.asyncio
    async def test_ensure_full_write_raises_forbidden(self, services, planet, outsider):
        with pytest.raises(ForbiddenError):
            await services.permissions.ensure_full_write(outsider, planet.id)

    @pytest.mark.asyncio
    async def test_ensure_public_write_hides_private_planet(self, services, private_planet, outsider):
        with pytest.raises(NotFoundError):
            await services.permissions.ensure_public_write(outsider, private_planet.id)

    @pytest.mark.asyncio
    async def test_ensure_returns_planet(self, services, planet, member):
        resolved = await services.permissions.ensure_full_write(member, planet.id)
        assert resolved.id == planet.id


class TestAdminTier:
    @pytest.mark.asyncio
    async def test_admin_flag(self, services, admin_user, member):
        assert await services.permissions.admin(admin_user)
        assert not await services.permissions.admin(member)

    @pytest.mark.asyncio
    async def test_ensure_admin(self, services, member):
        with pytest.raises(ForbiddenError):
            await services.permissions.ensure_admin(member)
        with pytest.raises(ForbiddenError):
            await services.permissions.ensure_admin(None)
