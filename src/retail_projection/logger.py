import logging
import sys


def setup_logger(name: str = "retail_projection", level: int | str = logging.INFO) -> logging.Logger:
    """
    Configure and return the package logger.

    Module loggers propagate here, so one handler covers the whole pipeline.
    """
    logger = logging.getLogger(name)
    logger.setLevel(level)

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s"))
        logger.addHandler(handler)

    return logger
