"""Configuration for ledgersync.

Settings come from environment variables; CLI options override them.

- LEDGERSYNC_DB_PATH: SQLite database file (default ~/.ledgersync/ledgersync.db)
- LEDGERSYNC_MATCH_TOLERANCE_DAYS: auto-match date window in days (default 3)
- LEDGERSYNC_LOG_LEVEL: logging level name (default WARNING)
"""

import logging
import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

DEFAULT_MATCH_TOLERANCE_DAYS = 3
DEFAULT_LOG_LEVEL = "WARNING"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


@dataclass(frozen=True)
class Settings:
    """Runtime settings."""

    db_path: Optional[str] = None
    match_tolerance_days: int = DEFAULT_MATCH_TOLERANCE_DAYS
    log_level: str = DEFAULT_LOG_LEVEL

    @classmethod
    def from_env(cls) -> "Settings":
        """Load settings from environment variables.

        Raises:
            ValueError: If LEDGERSYNC_MATCH_TOLERANCE_DAYS is not a non-negative integer
        """
        tolerance_raw = os.environ.get("LEDGERSYNC_MATCH_TOLERANCE_DAYS")
        tolerance = DEFAULT_MATCH_TOLERANCE_DAYS
        if tolerance_raw:
            try:
                tolerance = int(tolerance_raw)
            except ValueError as e:
                raise ValueError(f"LEDGERSYNC_MATCH_TOLERANCE_DAYS must be an integer, got '{tolerance_raw}'") from e
            if tolerance < 0:
                raise ValueError("LEDGERSYNC_MATCH_TOLERANCE_DAYS must not be negative")

        return cls(
            db_path=os.environ.get("LEDGERSYNC_DB_PATH") or None,
            match_tolerance_days=tolerance,
            log_level=os.environ.get("LEDGERSYNC_LOG_LEVEL", DEFAULT_LOG_LEVEL),
        )

    def resolve_db_path(self) -> str:
        """Return the configured database path, defaulting to ~/.ledgersync/ledgersync.db."""
        if self.db_path is not None:
            return self.db_path

        db_dir = Path.home() / ".ledgersync"
        db_dir.mkdir(exist_ok=True)
        return str(db_dir / "ledgersync.db")


def configure_logging(level: str = DEFAULT_LOG_LEVEL) -> None:
    """Configure the ledgersync logger hierarchy to write to stderr."""
    logger = logging.getLogger("ledgersync")
    logger.setLevel(getattr(logging, level.upper(), logging.WARNING))

    # Replace handlers so repeated CLI invocations in one process do not stack them
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)
