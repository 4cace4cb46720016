"""
Logging setup for the application server.

Every module logs through ``logging.getLogger(__name__)`` so all records land
under the ``appserver`` logger tree configured here.
"""

import logging

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"

ROOT_LOGGER = "appserver"
ACCESS_LOGGER = "appserver.access"


def configure_logging(level: str = "INFO") -> logging.Logger:
    """
    Attach a console handler to the ``appserver`` logger.

    Calling it again only updates the level.

    Args:
        level: Log level name

    Returns:
        The configured ``appserver`` logger
    """
    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(level.upper())

    if not any(getattr(h, "_appserver", False) for h in logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._appserver = True  # type: ignore[attr-defined]
        logger.addHandler(handler)

    return logger
