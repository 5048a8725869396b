"""
Logging setup shared by the client facade and the CLI.
"""

import logging

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

# Connection pool chatter from requests
TRANSPORT_LOGGERS = ("urllib3",)


def setup_logger(logger: logging.Logger, log_level: int) -> None:
    """
    Attach a stream handler to ``logger`` once and apply ``log_level``.

    Transport loggers are held at WARNING unless DEBUG is requested.
    """
    logger.setLevel(log_level)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
    for handler in logger.handlers:
        handler.setLevel(log_level)

    transport_level = logging.DEBUG if log_level <= logging.DEBUG else logging.WARNING
    for name in TRANSPORT_LOGGERS:
        logging.getLogger(name).setLevel(transport_level)
