import logging

from app.core import config

_configured = False


def get_logger(name: str) -> logging.Logger:
    """
    Get a module logger.

    The root handler is configured once, on first use, from LOG_LEVEL.

    Usage:
        log = get_logger(__name__)
        log.info("Loaded %s permissions", count)
    """
    global _configured
    if not _configured:
        logging.basicConfig(
            level=config.LOG_LEVEL,
            format="%(asctime)s %(levelname)-8s %(name)s: %(message)s",
        )
        _configured = True
    return logging.getLogger(name)
