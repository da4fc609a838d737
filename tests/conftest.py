"""Pytest configuration and fixtures for starship tests."""

import asyncio
from typing import AsyncIterator, Dict, List, Optional, Set, Tuple

import pytest
import pytest_asyncio

from starship.api.container import Services, build_services
from starship.config.settings import StarshipSettings
from starship.core.context import RequestContext, UserToken
from starship.core.exceptions import NotFoundError
from starship.features.events.adapters import MemoryEventTransport
from starship.features.planets.entities import Planet
from starship.features.storage.entities import ObjectHead
from starship.features.store.adapters import MemoryEntityStore
from starship.features.store.repositories.base import generate_id
from starship.features.users.entities import User


class FakeObjectStorage:
    """Object storage double keeping bytes in a dict."""

    def __init__(self):
        self.objects: Dict[str, bytes] = {}
        self.deleted: List[str] = []
        self.delete_batches: List[List[str]] = []

    async def issue_upload_url(self, key: str, content_type: str, ttl: int) -> str:
        return f"https://bucket.test/upload/{key}?ttl={ttl}"

    async def issue_download_url(self, key: str, ttl: int, filename_hint: Optional[str] = None) -> str:
        return f"https://bucket.test/download/{key}?ttl={ttl}&name={filename_hint or ''}"

    async def head_object(self, key: str) -> ObjectHead:
        if key not in self.objects:
            raise NotFoundError()
        return ObjectHead(size=len(self.objects[key]))

    async def delete_object(self, key: str) -> None:
        self.objects.pop(key, None)
        self.deleted.append(key)

    async def delete_objects(self, keys: List[str]) -> None:
        self.delete_batches.append(list(keys))
        for key in keys:
            await self.delete_object(key)

    async def copy_object(self, source_key: str, destination_key: str) -> None:
        if source_key not in self.objects:
            raise NotFoundError()
        self.objects[destination_key] = self.objects[source_key]

    async def iter_object(self, key: str) -> AsyncIterator[bytes]:
        if key not in self.objects:
            raise NotFoundError()
        data = self.objects[key]
        for start in range(0, len(data), 4):
            yield data[start:start + 4]


class FakePubSub:
    """Subscription handle of ``FakeRedis``."""

    def __init__(self, client: "FakeRedis"):
        self.client = client
        self.queue: asyncio.Queue = asyncio.Queue()
        self.closed = False

    async def subscribe(self, channel: str) -> None:
        self.client.channels.setdefault(channel, set()).add(self.queue)

    async def unsubscribe(self, channel: str) -> None:
        self.client.channels.get(channel, set()).discard(self.queue)

    async def listen(self):
        while True:
            yield await self.queue.get()

    async def aclose(self) -> None:
        self.closed = True


class FakeRedis:
    """In-process stand-in for the pub/sub part of a redis.asyncio client."""

    def __init__(self):
        self.channels: Dict[str, Set[asyncio.Queue]] = {}
        self.published: List[Tuple[str, str]] = []

    async def publish(self, channel: str, data: str) -> int:
        self.published.append((channel, data))
        queues = self.channels.get(channel, set())
        for queue in queues:
            queue.put_nowait({"type": "message", "channel": channel.encode(), "data": data.encode()})
        return len(queues)

    def pubsub(self, ignore_subscribe_messages: bool = False) -> FakePubSub:
        return FakePubSub(self)

    async def ping(self) -> bool:
        return True

    async def aclose(self) -> None:
        pass


@pytest.fixture
def settings():
    return StarshipSettings(
        environment="test",
        jwt_secret="test-secret",
        upload_cap_bytes=1000,
        site_url="http://starship.test",
        subscriber_queue_size=16,
    )


@pytest.fixture
def store():
    return MemoryEntityStore()


@pytest.fixture
def transport(settings):
    return MemoryEventTransport(settings.subscriber_queue_size)


@pytest.fixture
def fake_redis():
    return FakeRedis()


@pytest.fixture
def storage():
    return FakeObjectStorage()


@pytest.fixture
def services(settings, store, transport, storage) -> Services:
    return build_services(settings, store, transport, storage)


@pytest.fixture
def make_user(services):
    """Insert a user directly and return it."""
    async def factory(username: str, **fields) -> User:
        user = User(id=generate_id(), username=username, email=f"{username}@starship.test", **fields)
        return await services.users.user_repository.insert(user)
    return factory


@pytest.fixture
def context_for(services):
    """Fresh request context for a user, or an anonymous one."""
    def factory(user: Optional[User] = None) -> RequestContext:
        token = UserToken(id=user.id, username=user.username, admin=user.admin) if user else None
        return RequestContext(loaders=services.loaders(), user=token)
    return factory


@pytest_asyncio.fixture
async def owner(make_user):
    return await make_user("owner")


@pytest_asyncio.fixture
async def member(make_user):
    return await make_user("member")


@pytest_asyncio.fixture
async def outsider(make_user):
    return await make_user("outsider")


@pytest_asyncio.fixture
async def admin_user(make_user):
    return await make_user("admin", admin=True)


@pytest_asyncio.fixture
async def planet(services, owner, member) -> Planet:
    """Public planet owned by ``owner`` with ``member`` as its only member."""
    return await services.planets.planet_repository.insert(
        Planet(id=generate_id(), name="Andromeda", owner=owner.id, members=[member.id])
    )


@pytest_asyncio.fixture
async def private_planet(services, owner, member) -> Planet:
    return await services.planets.planet_repository.insert(
        Planet(id=generate_id(), name="Hidden", owner=owner.id, members=[member.id], private=True)
    )


@pytest.fixture
def add_component(services, context_for, owner):
    """Add a component through the planet service and return its id."""
    async def factory(planet: Planet, component_type: str, name: str = "component") -> str:
        updated = await services.planets.add_component(context_for(owner), planet.id, component_type, name)
        return updated.components[-1]["component_id"]
    return factory
