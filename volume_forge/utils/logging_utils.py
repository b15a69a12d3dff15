import logging
import sys

_PACKAGE_LOGGER = "volume_forge"


def get_logger(name: str) -> logging.Logger:
    logger = logging.getLogger(name)
    if not logger.handlers:
        logger.setLevel(logging.INFO)
        handler = logging.StreamHandler(sys.stdout)
        formatter = logging.Formatter(
            "[%(asctime)s] %(levelname)s - %(name)s - %(message)s"
        )
        handler.setFormatter(formatter)
        logger.addHandler(handler)
    return logger


def set_log_level(level: str) -> None:
    """Apply a level name (e.g. "WARNING") to every volume_forge logger created so far."""
    numeric = logging.getLevelName(level.upper())
    if not isinstance(numeric, int):
        raise ValueError(f"unknown log level: {level}")

    for name in list(logging.root.manager.loggerDict):
        if name == _PACKAGE_LOGGER or name.startswith(_PACKAGE_LOGGER + "."):
            logging.getLogger(name).setLevel(numeric)
