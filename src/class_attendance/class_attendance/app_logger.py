import logging
import os

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
_DEFAULT_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
_ROOT_NAME = "class_attendance"


def setup_logging(level: str | None = None) -> logging.Logger:
    lvl = getattr(logging, (level or _DEFAULT_LEVEL).upper(), logging.INFO)

    logger = logging.getLogger(_ROOT_NAME)
    logger.setLevel(lvl)

    # Add a stream handler once, even if the app factory runs several times.
    if not any(isinstance(h, logging.StreamHandler) for h in logger.handlers):
        ch = logging.StreamHandler()
        ch.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(ch)
    for h in logger.handlers:
        h.setLevel(lvl)

    logger.propagate = False
    return logger


def get_logger(name: str | None = None) -> logging.Logger:
    """Child of the package logger; accepts dotted module names."""
    if not name:
        return logging.getLogger(_ROOT_NAME)
    short = name.rsplit(f"{_ROOT_NAME}.", 1)[-1]
    return logging.getLogger(f"{_ROOT_NAME}.{short}")
