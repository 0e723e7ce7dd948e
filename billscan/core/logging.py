import sys
from loguru import logger
from .config import settings


def setup_logging(level: str | None = None):
    """Replace loguru's default sink with a single stderr sink at the configured level."""
    logger.remove()
    logger.add(
        sys.stderr,
        level=(level or settings.log_level).upper(),
        format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
               "<cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level> | {extra}",
        backtrace=False,
        diagnose=False,
    )
    return logger
