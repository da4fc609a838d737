"""GraphQL schema and router."""

import logging
from typing import List, Optional

import strawberry
from graphql import GraphQLError
from strawberry.extensions import MaskErrors, QueryDepthLimiter
from strawberry.fastapi import GraphQLRouter
from strawberry.types import ExecutionContext

from ...core.exceptions import StarshipError
from .context import get_graphql_context
from .mutations import Mutation
from .queries import Query
from .subscriptions import Subscription

logger = logging.getLogger(__name__)


def _is_unexpected(error: GraphQLError) -> bool:
    """Mask everything that is not a platform error or a query error."""
    original = error.original_error
    return original is not None and not isinstance(original, StarshipError)


class StarshipSchema(strawberry.Schema):
    """Adds ``extensions.code`` to platform errors before they are rendered."""

    def process_errors(
        self, errors: List[GraphQLError], execution_context: Optional[ExecutionContext] = None
    ) -> None:
        for error in errors:
            original = error.original_error
            if isinstance(original, StarshipError):
                error.extensions = {**(error.extensions or {}), "code": original.error_code}
                logger.debug(f"{original.error_code} at {error.path}: {original.message}")
            else:
                logger.error(f"GraphQL error: {error.message}", exc_info=original)


def create_schema(is_production: bool = True) -> strawberry.Schema:
    extensions = [QueryDepthLimiter(max_depth=12)]
    if is_production:
        extensions.append(MaskErrors(should_mask_error=_is_unexpected))
    return StarshipSchema(query=Query, mutation=Mutation, subscription=Subscription, extensions=extensions)


def create_graphql_router(is_production: bool = True) -> GraphQLRouter:
    return GraphQLRouter(create_schema(is_production), context_getter=get_graphql_context)
