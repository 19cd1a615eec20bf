"""
Configuration management for the Inventory Ledger application.

This module handles:
- Database path and URL configuration
- Environment-specific configuration (development vs. production)
- Log level selection
"""

import logging
import os
from pathlib import Path
from typing import Optional

from .constants import (
    APP_NAME,
    APP_VERSION,
    DATABASE_FILENAME,
    DATABASE_VERSION,
)

ENV_ENVIRONMENT = "INVENTORY_LEDGER_ENV"
ENV_DATABASE_URL = "INVENTORY_LEDGER_DB_URL"
ENV_LOG_LEVEL = "INVENTORY_LEDGER_LOG_LEVEL"


class Config:
    """
    Application configuration manager.

    Handles database location, environment mode and logging settings.
    """

    def __init__(self, environment: str = "production"):
        """
        Initialize configuration.

        Args:
            environment: Environment mode - 'production' or 'development'
        """
        self.environment = environment
        self._app_name = APP_NAME
        self._app_version = APP_VERSION
        self._database_version = DATABASE_VERSION

        if environment == "development":
            self._base_dir = self._get_project_data_dir()
        else:
            self._base_dir = self._get_user_documents_dir()

        self._database_dir = self._base_dir
        self._database_path = self._database_dir / DATABASE_FILENAME

    def _get_project_data_dir(self) -> Path:
        """
        Get the project's data directory for development.

        Returns:
            Path to project data/ directory
        """
        # Project root sits above src/inventory_ledger/utils
        project_root = Path(__file__).parent.parent.parent.parent
        return project_root / "data"

    def _get_user_documents_dir(self) -> Path:
        """
        Get the user's Documents directory for production.

        Returns:
            Path to user's Documents folder with app subdirectory
        """
        return Path.home() / "Documents" / "InventoryLedger"

    def ensure_directories(self) -> None:
        """Create the database directory if it doesn't exist."""
        self._database_dir.mkdir(parents=True, exist_ok=True)

    @property
    def app_name(self) -> str:
        """Application name."""
        return self._app_name

    @property
    def app_version(self) -> str:
        """Application version."""
        return self._app_version

    @property
    def database_version(self) -> str:
        """Database schema version."""
        return self._database_version

    @property
    def database_path(self) -> Path:
        """Full path to the database file."""
        return self._database_path

    @property
    def database_url(self) -> str:
        """
        SQLAlchemy database URL.

        INVENTORY_LEDGER_DB_URL takes precedence over the file location.

        Returns:
            Database URL string for SQLAlchemy
        """
        override = os.environ.get(ENV_DATABASE_URL)
        if override:
            return override
        db_path_str = str(self._database_path).replace("\\", "/")
        return f"sqlite:///{db_path_str}"

    @property
    def log_level(self) -> int:
        """Logging level from INVENTORY_LEDGER_LOG_LEVEL (default INFO)."""
        name = os.environ.get(ENV_LOG_LEVEL, "INFO").upper()
        level = logging.getLevelName(name)
        return level if isinstance(level, int) else logging.INFO

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.environment == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.environment == "production"

    def database_exists(self) -> bool:
        """
        Check if database file exists.

        Returns:
            True if database file exists, False otherwise
        """
        return self._database_path.exists()

    def __repr__(self) -> str:
        """String representation of config."""
        return f"Config(environment='{self.environment}', database_path='{self._database_path}')"


_config_instance: Optional[Config] = None


def get_config(environment: Optional[str] = None) -> Config:
    """
    Get the configuration instance.

    Once created, the instance's environment cannot be changed by passing
    a different environment argument, which prevents switching databases
    mid-session.

    Args:
        environment: Optional environment for initial creation. If None, uses
                    INVENTORY_LEDGER_ENV or defaults to production. Ignored if
                    the instance already exists.

    Returns:
        Config instance
    """
    global _config_instance

    if _config_instance is None:
        if environment is None:
            environment = os.environ.get(ENV_ENVIRONMENT, "production")
        _config_instance = Config(environment)
    elif environment is not None and environment != _config_instance.environment:
        logger = logging.getLogger(__name__)
        logger.warning(
            f"get_config() called with environment='{environment}' but config "
            f"already exists with environment='{_config_instance.environment}'. "
            f"Returning existing config."
        )

    return _config_instance


def reset_config() -> None:
    """
    Reset the configuration instance.

    Useful for testing.
    """
    global _config_instance
    _config_instance = None
