import logging
import sys

ROOT_LOGGER = "ride_dispatch"
NOISY_LOGGERS = ("discord", "discord.client", "discord.gateway", "httpx", "uvicorn.access")


def setup_logging(level: int | str = logging.INFO) -> logging.Logger:
    logger = logging.getLogger(ROOT_LOGGER)
    if logger.handlers:
        return logger  # already configured
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO
    logger.setLevel(level)
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        logging.Formatter("[%(asctime)s] %(levelname)s %(name)s: %(message)s")
    )
    logger.addHandler(handler)
    if level > logging.DEBUG:
        for name in NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)
    return logger


def get_logger(name: str) -> logging.Logger:
    """Return a child of the ``ride_dispatch`` logger."""
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")
