import sys

from loguru import logger

LOG_FORMAT = (
    "<green>{time:HH:mm:ss.SSS}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan> - <level>{message}</level>"
)


def configure_logging(level: str = "INFO", sink=sys.stderr) -> int:
    """Replace loguru's default sink; returns the new handler id."""
    logger.remove()
    return logger.add(sink, level=level.upper(), format=LOG_FORMAT)
