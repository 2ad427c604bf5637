"""Process-wide logging configuration."""

import logging

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Configure the root logger once for the server process."""
    logging.basicConfig(level=level, format=LOG_FORMAT, force=True)
    # SQL echo is controlled by DB_ECHO, not by the app log level.
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
