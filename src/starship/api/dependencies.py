"""FastAPI dependencies."""

from typing import Optional

from fastapi import Request

from ..core.context import RequestContext
from .container import Services


def get_services(request: Request) -> Services:
    return request.app.state.services


def build_context(services: Services, authorization: Optional[str]) -> RequestContext:
    """Decode the caller (if any) and attach fresh loaders.

    An absent header means an anonymous caller; a malformed or expired
    token raises BadSessionError.
    """
    return RequestContext(
        loaders=services.loaders(),
        user=services.tokens.from_authorization(authorization),
    )


async def get_request_context(request: Request) -> RequestContext:
    return build_context(get_services(request), request.headers.get("Authorization"))
