"""GraphQL surface over the services."""

from .schema import create_graphql_router, create_schema

__all__ = ["create_graphql_router", "create_schema"]
