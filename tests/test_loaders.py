"""Tests for the per-request batching loaders."""

import asyncio

import pytest

from starship.core.exceptions import StoreError
from starship.config.constants import ComponentType
from starship.features.files.entities import Files
from starship.features.pages.entities import Page
from starship.features.store.entities import Collections
from starship.features.users.entities import PublicUser
from starship.features.wikis.entities import Wiki


@pytest.fixture
def recorded_queries(store, monkeypatch):
    """Record the filters each collection's ``find_many`` receives."""
    calls = []

    def record(name: str):
        collection = store.collection(name)
        original = collection.find_many

        async def find_many(flt=None, **kwargs):
            calls.append((name, flt))
            return await original(flt, **kwargs)

        monkeypatch.setattr(collection, "find_many", find_many)

    return calls, record


class TestBatching:
    """Test that loads in one turn collapse into one store query."""

    @pytest.mark.asyncio
    async def test_loads_in_one_turn_share_a_batch(self, services, make_user, recorded_queries):
        calls, record = recorded_queries
        a = await make_user("alpha")
        b = await make_user("beta")
        record(Collections.USERS)
        loaders = services.loaders()

        results = await asyncio.gather(
            loaders.users.load(a.id), loaders.users.load(b.id), loaders.users.load(a.id)
        )

        assert [user.username for user in results] == ["alpha", "beta", "alpha"]
        assert calls == [(Collections.USERS, {"id": {"$in": [a.id, b.id]}})]

    @pytest.mark.asyncio
    async def test_repeated_loads_return_the_identical_object(self, services, planet, recorded_queries):
        calls, record = recorded_queries
        record(Collections.PLANETS)
        loaders = services.loaders()

        first = await loaders.planets.load(planet.id)
        second = await loaders.planets.load(planet.id)

        assert first is second
        assert len(calls) == 1

    @pytest.mark.asyncio
    async def test_missing_ids_do_not_fail_siblings(self, services, planet):
        loaders = services.loaders()

        found, missing = await loaders.planets.load_many([planet.id, "nope"])

        assert found.id == planet.id
        assert missing is None

    @pytest.mark.asyncio
    async def test_store_failure_reaches_every_pending_load(self, services, store, monkeypatch):
        async def broken(flt=None, **kwargs):
            raise StoreError()

        monkeypatch.setattr(store.collection(Collections.PLANETS), "find_many", broken)
        loaders = services.loaders()

        results = await asyncio.gather(
            loaders.planets.load("a"), loaders.planets.load("b"), return_exceptions=True
        )

        assert all(isinstance(result, StoreError) for result in results)


class TestRequestLoaders:
    @pytest.mark.asyncio
    async def test_users_loader_returns_public_projection(self, services, make_user):
        user = await make_user("pilot", password="hash", profile_bio="hi")
        loaders = services.loaders()

        loaded = await loaders.users.load(user.id)

        assert isinstance(loaded, PublicUser)
        assert loaded.profile_bio == "hi"
        assert not hasattr(loaded, "password")
        assert not hasattr(loaded, "email")

    @pytest.mark.asyncio
    async def test_each_request_gets_fresh_loaders(self, services, planet):
        first = services.loaders()
        second = services.loaders()
        assert first is not second
        a = await first.planets.load(planet.id)
        b = await second.planets.load(planet.id)
        assert a == b and a is not b

    @pytest.mark.asyncio
    async def test_unknown_id_is_none(self, services):
        assert await services.loaders().planets.load("nope") is None

    @pytest.mark.asyncio
    async def test_every_component_variant_has_a_loader(self, services, planet, add_component):
        page_id = await add_component(planet, ComponentType.PAGE.value)
        wiki_id = await add_component(planet, ComponentType.WIKI.value)
        files_id = await add_component(planet, ComponentType.FILES.value)
        loaders = services.loaders()

        page, wiki, files = await asyncio.gather(
            loaders.pages.load(page_id), loaders.wikis.load(wiki_id), loaders.files.load(files_id)
        )

        assert isinstance(page, Page) and page.planet == planet.id
        assert isinstance(wiki, Wiki) and wiki.id == wiki_id
        assert isinstance(files, Files) and files.id == files_id
