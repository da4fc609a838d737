"""GraphQL context: services plus the per-request context."""

from fastapi.requests import HTTPConnection
from strawberry.fastapi import BaseContext

from ...core.context import RequestContext
from ..container import Services
from ..dependencies import build_context


class StarshipContext(BaseContext):
    def __init__(self, services: Services, request_context: RequestContext):
        super().__init__()
        self.services = services
        self.request_context = request_context

    @property
    def loaders(self):
        return self.request_context.loaders


async def get_graphql_context(connection: HTTPConnection) -> StarshipContext:
    """Built once per operation, or once per subscription connection."""
    services: Services = connection.app.state.services
    return StarshipContext(services, build_context(services, connection.headers.get("Authorization")))
