"""starship-server entry point."""

from pathlib import Path

import uvicorn
from dotenv import load_dotenv

from .config.logging_config import LoggingConfig

# .env first, then .env.local overrides
_project_root = Path.cwd()
load_dotenv(_project_root / ".env")
load_dotenv(_project_root / ".env.local", override=True)

LoggingConfig.configure()

from .api import create_app  # noqa: E402
from .config.settings import get_settings  # noqa: E402

logger = LoggingConfig.get_logger(__name__)

app = create_app()


def main() -> None:
    """Run the application."""
    settings = get_settings()
    logger.info(f"Starting {settings.app_name} on {settings.host}:{settings.port}")
    uvicorn.run(
        "starship.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level="debug" if settings.debug else "info",
        access_log=True,
    )


if __name__ == "__main__":
    main()
