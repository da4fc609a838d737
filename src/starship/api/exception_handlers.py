"""Exception handlers for the HTTP surface.

StarshipError subclasses render as ``{"error": {code, message, details}}``
with their mapped status. Anything else becomes a generic 500 that hides
the exception text in production.
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from ..core.exceptions import StarshipError, create_error_response

logger = logging.getLogger(__name__)


class ExceptionHandlerRegistry:
    """Registers the platform's exception handlers on an application."""

    def __init__(self, is_production: bool = True):
        self.is_production = is_production

    def register_handlers(self, app: FastAPI) -> None:
        @app.exception_handler(StarshipError)
        async def starship_exception_handler(request: Request, exc: StarshipError):
            """Handle platform exceptions."""
            return JSONResponse(status_code=exc.status_code, content=create_error_response(exc))

        @app.exception_handler(Exception)
        async def general_exception_handler(request: Request, exc: Exception):
            """Handle unexpected exceptions."""
            logger.error(f"Unhandled exception: {exc}", exc_info=True)
            message = "An unexpected error occurred" if self.is_production else str(exc)
            return JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content={"error": {"code": "INTERNAL_ERROR", "message": message, "details": {}}},
            )


def register_exception_handlers(app: FastAPI, is_production: bool = True) -> None:
    ExceptionHandlerRegistry(is_production).register_handlers(app)
