"""Configuration management for the worship slides application."""

import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env file from config directory or project root
config_env = Path(__file__).parent.parent.parent / "config" / ".env"
if config_env.exists():
    load_dotenv(config_env)
else:
    load_dotenv()


class Config:
    """Application configuration."""

    def __init__(self) -> None:
        """Initialize configuration from environment variables."""
        # Database settings
        default_db_path = str(Path.home() / ".worship-slides" / "worship.db")
        self.database_path = Path(
            os.getenv("WORSHIP_SLIDES_DATABASE_PATH", default_db_path)
        )

        # Backup settings
        self.backup_directory = Path(
            os.getenv(
                "WORSHIP_SLIDES_BACKUP_DIRECTORY",
                str(Path.home() / "Documents" / "worship-slides-backups"),
            )
        )

        # Song codes accepted when entering songs
        self.allowed_codes = tuple(
            os.getenv("WORSHIP_SLIDES_ALLOWED_CODES", "ABCDEFG").upper()
        )

        # Interactive prompts for conflict resolution
        self.interactive_mode = os.getenv(
            "WORSHIP_SLIDES_INTERACTIVE", "true"
        ).lower() in ("1", "true", "yes")

        self._ensure_directories()

    def _ensure_directories(self) -> None:
        """Ensure required directories exist."""
        self.database_path.parent.mkdir(parents=True, exist_ok=True)
        self.backup_directory.mkdir(parents=True, exist_ok=True)


def get_config() -> Config:
    """Get application configuration."""
    return Config()
