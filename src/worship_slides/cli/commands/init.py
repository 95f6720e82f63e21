"""Application setup shared by CLI commands.

Provides the ``WorshipSlidesApp`` context object and ``init_db``, which opens
the catalogue database and creates its schema when needed.
"""

import logging
from typing import Any, Optional

import click

from ...config import Config, get_config
from ...database import DatabaseService

logger = logging.getLogger(__name__)


class InitializationError(Exception):
    """Raised when initialization fails."""

    pass


def init_db(config: Optional[Config] = None) -> DatabaseService:
    """Open the catalogue database, creating the schema if needed.

    Args:
        config: Application configuration (creates new if not provided)

    Raises:
        InitializationError: If database cannot be initialized
    """
    if config is None:
        config = Config()

    try:
        db_service = DatabaseService(db_path=config.database_path)

        if not db_service.is_initialized():
            logger.info("Initializing database schema...")
            db_service.init_db()

        stats = db_service.get_statistics()
        logger.debug(
            "Database connected: %s songs, %s tags", stats["songs"], stats["tags"]
        )
        return db_service

    except Exception as e:
        logger.exception("Database initialization failed")
        raise InitializationError(f"Database initialization failed: {e}") from e


class WorshipSlidesApp:
    """Context object handed to every CLI command."""

    def __init__(self, config_override: Optional[dict[str, Any]] = None) -> None:
        """Initialize application.

        Args:
            config_override: Optional configuration overrides
        """
        self.config = get_config()
        if config_override:
            for key, value in config_override.items():
                setattr(self.config, key, value)
        self._db_service: Optional[DatabaseService] = None

    @property
    def db_service(self) -> DatabaseService:
        """Database service, opened on first use."""
        if self._db_service is None:
            self._db_service = init_db(self.config)
        return self._db_service

    def close(self) -> None:
        """Release the database connection if one was opened."""
        if self._db_service is not None:
            self._db_service.close()
            self._db_service = None


def require_db(app: WorshipSlidesApp) -> DatabaseService:
    """Return the app database service, reporting failures as CLI errors."""
    try:
        return app.db_service
    except InitializationError as e:
        raise click.ClickException(str(e)) from e
