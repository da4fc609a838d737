"""FastAPI application factory.

The lifespan picks the backends from settings: PostgreSQL when a database
is configured (in-memory for ``environment=test``), Redis pub/sub when a
Redis URL is set, S3 for object storage. Everything above those choices
is backend agnostic.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from ..config.settings import StarshipSettings, get_settings
from ..features.events.adapters import MemoryEventTransport, RedisEventTransport
from ..features.storage.adapters import S3ObjectStorage
from ..features.store.adapters import AsyncPGEntityStore, MemoryEntityStore
from ..features.store.entities import Collections
from .container import Services, build_services
from .exception_handlers import register_exception_handlers
from .graphql import create_graphql_router
from .routers import download, system

logger = logging.getLogger(__name__)


async def create_services(settings: StarshipSettings) -> Services:
    if settings.environment.lower() == "test":
        store = MemoryEntityStore()
    else:
        store = AsyncPGEntityStore(
            settings.database_url,
            min_size=settings.db_pool_min_size,
            max_size=settings.db_pool_max_size,
            command_timeout=settings.db_command_timeout,
        )
    await store.connect()
    if isinstance(store, AsyncPGEntityStore):
        for name in Collections.ALL:
            await store.ensure_collection(name)

    if settings.uses_distributed_events:
        transport = RedisEventTransport(settings.redis_url)
        logger.info("Using Redis pub/sub for live events")
    else:
        transport = MemoryEventTransport(settings.subscriber_queue_size)
        logger.info("Using in-process live events")

    storage = S3ObjectStorage(settings)
    if not await asyncio.to_thread(storage.check_connection):
        logger.warning(f"Bucket {settings.bucket_name} is not reachable; file operations will fail")

    return build_services(settings, store, transport, storage)


async def shutdown_services(services: Services) -> None:
    await services.cleanup.wait()
    await services.transport.close()
    await services.store.close()


def create_app(settings: Optional[StarshipSettings] = None, services: Optional[Services] = None) -> FastAPI:
    """Create the application.

    Passing ``services`` skips backend selection; tests use it to run the
    app over in-memory adapters.
    """
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owned = services is None
        app.state.services = services or await create_services(settings)
        logger.info(f"{settings.app_name} {settings.app_version} started ({settings.environment})")
        yield
        if owned:
            await shutdown_services(app.state.services)

    app = FastAPI(
        title="Starship API",
        version=settings.app_version,
        description="Planets, components and live chat",
        debug=settings.debug,
        lifespan=lifespan,
    )
    if services is not None:
        # Usable without running the lifespan
        app.state.services = services

    register_exception_handlers(app, is_production=settings.is_production)
    app.include_router(system.router)
    app.include_router(download.router)
    app.include_router(create_graphql_router(settings.is_production), prefix="/graphql")
    return app
