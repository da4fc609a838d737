"""Shared kernel: exceptions and the request context."""

from .context import RequestContext, UserToken

__all__ = ["RequestContext", "UserToken"]
