"""Logging configuration helpers."""

import logging

_NOISY_LOGGERS = ("httpx", "httpcore", "openai", "hpack")


def configure_logging(level: str = "INFO") -> None:
    """Configure the ``thought_reframer`` logger tree with one stream handler.

    Provider SDK loggers are capped at WARNING.
    """
    logger = logging.getLogger("thought_reframer")
    logger.setLevel(level.upper())
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    if logger.handlers:
        return
    handler = logging.StreamHandler()
    handler.setFormatter(
        logging.Formatter("%(asctime)s %(levelname)s: %(name)s: %(message)s")
    )
    logger.addHandler(handler)
    logger.propagate = False
